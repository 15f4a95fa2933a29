#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
xdrfile Color Output Utilities - ANSI colouring for log output
"""

import os
import sys


class Colors:
    """ANSI color codes for terminal output"""

    BRIGHT_RED = '\033[91m'
    BRIGHT_YELLOW = '\033[93m'

    BOLD = '\033[1m'
    DIM = '\033[2m'

    RESET = '\033[0m'

    @staticmethod
    def is_color_supported(stream=None):
        """
        Check if the terminal supports color output

        Returns:
            bool: True if colors are supported
        """
        if os.getenv('NO_COLOR'):
            return False

        if os.getenv('FORCE_COLOR'):
            return True

        stream = stream if stream is not None else sys.stderr
        if not hasattr(stream, 'isatty') or not stream.isatty():
            return False

        # ANSI escapes need Windows 10+; older consoles print them verbatim
        if sys.platform == 'win32':
            import platform
            return 'Windows-10' in platform.platform()

        return True


class ColorPrinter:
    """Utility class for colouring text"""

    def __init__(self, use_colors=None):
        """
        Initialize color printer

        Args:
            use_colors: Force enable/disable colors (None = auto-detect)
        """
        if use_colors is None:
            self.use_colors = Colors.is_color_supported()
        else:
            self.use_colors = use_colors

    def _colorize(self, text, *color_codes):
        if not self.use_colors:
            return text

        color_str = ''.join(color_codes)
        return f"{color_str}{text}{Colors.RESET}"

    def error(self, text):
        """Red text for error messages"""
        return self._colorize(text, Colors.BRIGHT_RED, Colors.BOLD)

    def warning(self, text):
        """Yellow text for warning messages"""
        return self._colorize(text, Colors.BRIGHT_YELLOW, Colors.BOLD)

    def dim(self, text):
        return self._colorize(text, Colors.DIM)


_color_printer = None


def get_color_printer() -> ColorPrinter:
    """Get the shared ColorPrinter instance"""
    global _color_printer
    if _color_printer is None:
        _color_printer = ColorPrinter()
    return _color_printer
