"""Colored logging formatter for better visibility."""

import logging


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for levels and bracketed subsystem tags."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m',       # Reset
        'BOLD': '\033[1m',        # Bold
        'CACHE_HIT': '\033[42m\033[30m',   # Green background, black text
        'CACHE_MISS': '\033[43m\033[30m',  # Yellow background, black text
        'BLUE': '\033[34m',       # Blue
        'MAGENTA': '\033[35m',    # Magenta
    }

    # Tag -> color key
    TAGS = {
        '[CACHE HIT]': 'CACHE_HIT',
        '[CACHE MISS]': 'CACHE_MISS',
        '[CACHE STORED]': 'BLUE',
        '[HIVE]': 'MAGENTA',
        '[OPENAI]': 'MAGENTA',
        '[FFMPEG]': 'BLUE',
        '[TIMELINE]': 'BOLD',
        '[REDIS]': 'BLUE',
        '[RATE LIMIT]': 'WARNING',
        '[AUTH]': 'WARNING',
    }

    def format(self, record):
        """Format log record with colors."""
        # Work on a copy so other handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"

        formatted = super().format(record)

        for tag, color in self.TAGS.items():
            if tag in formatted:
                formatted = formatted.replace(
                    tag, f"{self.COLORS[color]}{tag}{self.COLORS['RESET']}"
                )

        return formatted


def setup_colored_logging(level: str = "INFO") -> ColoredFormatter:
    """Configure the root logger and apply the colored formatter to its handlers."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    formatter = ColoredFormatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    for handler in logging.getLogger().handlers:
        handler.setFormatter(formatter)

    return formatter
