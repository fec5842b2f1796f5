"""
Omniboot - Instalação automatizada do OmniOS no QEMU
"""

__version__ = "0.1.0"
