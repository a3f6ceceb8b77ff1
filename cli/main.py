"""FileVault CLI entry point."""

import asyncio
import os
import sys
from pathlib import Path

from cli.config import Config
from cli.repl import repl_loop
from common.logging_config import setup_logging

CONFIG_DIR = Path(os.getenv('FILEVAULT_HOME', Path.home() / '.filevault'))


def main() -> None:
    """
    Start the REPL.

    Logs go to <FILEVAULT_HOME>/cli.log so they never interleave with
    prompts and progress lines. Pass --debug for DEBUG level.
    """
    debug = '--debug' in sys.argv[1:]
    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'INFO')
    logger = setup_logging('cli', log_level=log_level, log_file=CONFIG_DIR / 'cli.log')

    config = Config(CONFIG_DIR / 'config.json')
    logger.info(f"FileVault CLI starting [endpoint={config.get_endpoint()}, bucket={config.get_bucket_id()}]")

    try:
        asyncio.run(repl_loop(config))
    except KeyboardInterrupt:
        print("\nGoodbye!")
    except Exception as e:
        logger.error(f"CLI crashed: {e}", exc_info=True)
        raise
    finally:
        logger.info("FileVault CLI exiting")


if __name__ == "__main__":
    main()
