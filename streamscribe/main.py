"""Main application entry point for StreamScribe."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path

from streamscribe.services.streaming_service import StreamingService
from streamscribe.transcription.aggregator import TranscriptAggregator

from .config import StreamScribeConfig

logger = logging.getLogger(__name__)


class Server:

    def __init__(self, config_path: str, log_level: str = None):
        # Load configuration
        self.config = StreamScribeConfig(config_path)
        # Set up logging (command line overrides config)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)

    def init(self):
        logger.info("Initializing services...")
        self.streaming_service = StreamingService(self.config)
        self.aggregator = TranscriptAggregator(self.streaming_service.transcript_topic)

    def run(self, audio_path: str, save: bool = False) -> bool:
        try:
            result = asyncio.run(self.streaming_service.transcribe_file(audio_path, save=save))
        finally:
            self.cleanup()

        for failure in result["failures"]:
            print(f"⚠️  {failure}")
        if result["transcript_file"]:
            print(f"💾 Transcript saved to {result['transcript_file']}")
        return result["success"]

    def cleanup(self):
        # Shutdown aggregator and print results
        self.aggregator.shutdown()


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    # Get log file path from config
    log_file_path = config.get('logging.file_path', 'data/logs/streamscribe.log')
    console_output = config.get('logging.console_output', True)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    # Set up handlers
    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("StreamScribe starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for StreamScribe."""
    parser = argparse.ArgumentParser(
        description="StreamScribe - streaming speech-to-text over WebSocket"
    )

    parser.add_argument(
        "audio_file",
        type=str,
        help="Audio file to transcribe, encoded as the configured content type"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: looks for streamscribe.yaml)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, else INFO)"
    )

    parser.add_argument(
        "--save",
        action="store_true",
        help="Save the final transcript under the configured data directory"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="StreamScribe v0.1.0"
    )

    args = parser.parse_args()

    try:
        server = Server(args.config, args.log_level)
        server.init()
        success = server.run(args.audio_file, save=args.save)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        sys.exit(130)
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
