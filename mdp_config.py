#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - Configuration Module
================================================
Copyright (c) 2025 PNGN-Tec LLC

Centralized Configuration System
=================================
Complete configuration for Markdown preview rendering including:
- Layout parameters (indentation, rule width, terminal width)
- Structural glyphs (bullets, task boxes, quote marker, table borders)
- Width calculator cache settings
- Logging setup
- Theme selection

Configuration Overview
======================
Settings live in validated dataclasses aggregated by SystemConfig and held
by a thread-safe ConfigurationManager singleton. Environment variables with
the MDP_ prefix override the defaults at startup and on reload().

The theme is deliberately NOT held here as a value: only its name is. The
name is resolved to an immutable Theme once (see mdp_theme.get_theme) and
passed into each render explicitly.

Environment Overrides
=====================
- MDP_THEME: Theme name (default "solarized-osaka")
- MDP_INDENT_WIDTH: Columns of indentation per list level
- MDP_WIDTH: Fixed terminal width for rules
- MDP_LOG_LEVEL: Logging level name (DEBUG, INFO, WARNING, ...)
- MDP_DEBUG: Enable debug mode (true/1/yes)
- MDP_CACHE_SIZE: Width calculator cache entries

Module Interface
================
- get_config(): Current SystemConfig
- reload_config(): Apply a new configuration (or re-read environment)
- get_render_config() / get_cache_config() / get_logging_config()
- register_config_callback(): Change notifications
- configure_logging(): Install the stderr log handler
"""

import threading
import logging
import os
import shutil
import sys
from typing import Tuple, Optional, Callable
from dataclasses import dataclass, field

# Configure logging
logger = logging.getLogger('mdp_config')

# ============================================================================
# DEFAULTS
# ============================================================================

DEFAULT_THEME = "solarized-osaka"
DEFAULT_TERMINAL_WIDTH = 80

# Horizontal rule sizing
RULE_RATIO = 0.8
RULE_MAX_WIDTH = 100
RULE_GLYPH = "─"

# Bullets cycle by nesting depth
BULLET_GLYPHS = ("•", "◦", "▪")

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"

_TRUE_VALUES = ('true', '1', 'yes', 'on')


# ============================================================================
# RENDER CONFIGURATION
# ============================================================================

@dataclass
class RenderConfig:
    """
    Layout and glyph configuration for the rendering engine.

    Attributes:
        indent_width: Columns contributed by each open List frame
        quote_marker: Prefix emitted once per open BlockQuote frame
        bullet_glyphs: Unordered list markers, cycled by list depth
        task_checked: Marker for a completed task item
        task_unchecked: Marker for an open task item
        table_separator: Column border character
        align_left/align_center/align_right/align_none: Separator row markers
        width: Fixed output width (None asks the terminal)
        rule_ratio: Fraction of the width used by horizontal rules
        rule_max_width: Upper bound for horizontal rules
        rule_glyph: Character repeated to draw a rule
        show_heading_markers: Prefix headings with '#' x level
        show_code_fences: Draw fence lines around code blocks
        image_placeholder: Text shown for images without alt text
    """

    indent_width: int = 2
    quote_marker: str = "│ "
    bullet_glyphs: Tuple[str, ...] = BULLET_GLYPHS
    task_checked: str = "[x]"
    task_unchecked: str = "[ ]"

    # Tables
    table_separator: str = "|"
    align_left: str = ":---"
    align_center: str = ":---:"
    align_right: str = "---:"
    align_none: str = "---"

    # Rules
    width: Optional[int] = None
    rule_ratio: float = RULE_RATIO
    rule_max_width: int = RULE_MAX_WIDTH
    rule_glyph: str = RULE_GLYPH

    # Feature flags
    show_heading_markers: bool = True
    show_code_fences: bool = True
    image_placeholder: str = "image"

    def terminal_width(self) -> int:
        """Configured width, or the current terminal's columns."""
        if self.width is not None:
            return self.width
        return shutil.get_terminal_size((DEFAULT_TERMINAL_WIDTH, 24)).columns

    def rule_width(self) -> int:
        """Columns used by a horizontal rule."""
        width = int(self.terminal_width() * self.rule_ratio)
        return max(1, min(width, self.rule_max_width))

    def validate(self) -> bool:
        """Validate render configuration"""
        if self.indent_width <= 0:
            raise ValueError("Indent width must be positive")
        if self.width is not None and self.width <= 0:
            raise ValueError("Width must be positive")
        if not 0 < self.rule_ratio <= 1:
            raise ValueError("Rule ratio must be in (0, 1]")
        if self.rule_max_width <= 0:
            raise ValueError("Rule max width must be positive")
        if not self.bullet_glyphs or not all(self.bullet_glyphs):
            raise ValueError("Bullet glyphs must be non-empty")
        if not self.rule_glyph or not self.table_separator:
            raise ValueError("Rule glyph and table separator must be non-empty")
        return True


# ============================================================================
# CACHE CONFIGURATION
# ============================================================================

@dataclass
class CacheConfig:
    """
    Cache configuration for the width calculator.

    Attributes:
        default_size: Number of cached strings
        max_memory_mb: Memory bound for cached strings
        enable_caching: Master switch for caching
    """

    default_size: int = 1000
    max_memory_mb: float = 10.0
    enable_caching: bool = True

    def validate(self) -> bool:
        """Validate cache configuration"""
        if self.default_size <= 0:
            raise ValueError("Cache size must be positive")
        if self.max_memory_mb <= 0:
            raise ValueError("Cache memory limit must be positive")
        return True


# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================

@dataclass
class LoggingConfig:
    """Logging level and format"""

    level: str = "WARNING"
    format: str = LOG_FORMAT

    def validate(self) -> bool:
        """Validate logging configuration"""
        if not isinstance(logging.getLevelName(self.level.upper()), int):
            raise ValueError(f"Unknown log level: {self.level}")
        return True


# ============================================================================
# MAIN CONFIGURATION CLASS
# ============================================================================

@dataclass
class SystemConfig:
    """Complete system configuration"""

    # Sub-configurations
    render: RenderConfig = field(default_factory=RenderConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # System-wide settings
    theme: str = DEFAULT_THEME
    debug_mode: bool = False

    def validate(self) -> bool:
        """Validate entire configuration"""
        self.render.validate()
        self.cache.validate()
        self.logging.validate()
        if not self.theme:
            raise ValueError("Theme name must be non-empty")
        return True


# ============================================================================
# CONFIGURATION MANAGER (SINGLETON)
# ============================================================================

class ConfigurationManager:
    """
    Singleton configuration manager with runtime reloading.
    Thread-safe management of global configuration with change notifications.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._config = SystemConfig()
        self._callbacks = []
        self._config_lock = threading.RLock()
        try:
            self._config = self._apply_environment_overrides(SystemConfig())
        except ValueError as e:
            logger.error(f"Ignoring invalid environment configuration: {e}")

        self._initialized = True
        logger.info("Configuration manager initialized")

    @staticmethod
    def _apply_environment_overrides(config: SystemConfig) -> SystemConfig:
        """Apply MDP_* environment variables onto config and validate it"""

        if 'MDP_THEME' in os.environ:
            config.theme = os.environ['MDP_THEME']

        # Render settings
        if 'MDP_INDENT_WIDTH' in os.environ:
            config.render.indent_width = int(os.environ['MDP_INDENT_WIDTH'])
        if 'MDP_WIDTH' in os.environ:
            config.render.width = int(os.environ['MDP_WIDTH'])

        # Cache settings
        if 'MDP_CACHE_SIZE' in os.environ:
            config.cache.default_size = int(os.environ['MDP_CACHE_SIZE'])

        # Logging and debug mode
        if 'MDP_LOG_LEVEL' in os.environ:
            config.logging.level = os.environ['MDP_LOG_LEVEL'].upper()
        if 'MDP_DEBUG' in os.environ:
            config.debug_mode = os.environ['MDP_DEBUG'].lower() in _TRUE_VALUES
            if config.debug_mode:
                config.logging.level = "DEBUG"

        config.validate()
        return config

    @property
    def config(self) -> SystemConfig:
        """Get current configuration"""
        with self._config_lock:
            return self._config

    def reload(self, new_config: Optional[SystemConfig] = None) -> bool:
        """
        Reload configuration and notify callbacks.

        Args:
            new_config: New configuration to apply (re-reads env if None)

        Returns:
            True if reload successful, False if the previous config was kept
        """
        with self._config_lock:
            old_config = self._config

            try:
                if new_config is not None:
                    new_config.validate()
                    self._config = new_config
                else:
                    self._config = self._apply_environment_overrides(SystemConfig())
            except ValueError as e:
                logger.error(f"Configuration reload failed: {e}")
                self._config = old_config
                return False

            self._notify_callbacks(old_config, self._config)
            logger.info("Configuration reloaded successfully")
            return True

    def register_callback(self, callback: Callable[[SystemConfig, SystemConfig], None]):
        """
        Register callback for configuration changes.

        Args:
            callback: Function called with (old_config, new_config)
        """
        self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable):
        """Remove a registered callback"""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify_callbacks(self, old_config: SystemConfig, new_config: SystemConfig):
        """Notify all registered callbacks of configuration change"""
        for callback in list(self._callbacks):
            try:
                callback(old_config, new_config)
            except Exception as e:
                logger.error(f"Callback notification failed: {e}")


# ============================================================================
# PUBLIC API FUNCTIONS
# ============================================================================

_manager = ConfigurationManager()

def get_config() -> SystemConfig:
    """Get current system configuration"""
    return _manager.config

def reload_config(new_config: Optional[SystemConfig] = None) -> bool:
    """Reload system configuration"""
    return _manager.reload(new_config)

def register_config_callback(callback: Callable[[SystemConfig, SystemConfig], None]):
    """Register for configuration change notifications"""
    _manager.register_callback(callback)

def unregister_config_callback(callback: Callable):
    """Unregister a configuration change callback"""
    _manager.unregister_callback(callback)

def get_render_config() -> RenderConfig:
    """Get render configuration"""
    return _manager.config.render

def get_cache_config() -> CacheConfig:
    """Get cache configuration"""
    return _manager.config.cache

def get_logging_config() -> LoggingConfig:
    """Get logging configuration"""
    return _manager.config.logging


# ============================================================================
# LOGGING SETUP
# ============================================================================

_handler: Optional[logging.Handler] = None

def configure_logging(config: Optional[LoggingConfig] = None, stream=None) -> logging.Handler:
    """
    Install (or retune) the single stderr handler used by all mdp loggers.

    Args:
        config: Logging settings (uses current configuration if None)
        stream: Output stream for log records (stderr if None)

    Returns:
        The installed handler
    """
    global _handler

    config = config or get_logging_config()
    config.validate()
    level = logging.getLevelName(config.level.upper())

    root = logging.getLogger()
    if _handler is None:
        _handler = logging.StreamHandler(stream or sys.stderr)
        root.addHandler(_handler)
    elif stream is not None:
        _handler.setStream(stream)

    _handler.setFormatter(logging.Formatter(config.format))
    root.setLevel(level)
    return _handler
