"""Core functionality"""
from .script import Script
from .ssh_manager import SSHManager

__all__ = ["Script", "SSHManager"]
