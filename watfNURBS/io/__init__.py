"""
Configuration loading.
"""

from .config import KernelConfig, get_config, set_config, load_config
