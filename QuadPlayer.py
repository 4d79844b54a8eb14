import logging
import sys

from quadplay.audio import AudioPlayer
from quadplay.config import ConfigManager
from quadplay.controller import PlaybackController
from quadplay.importer import LibraryImporter
from quadplay.state_machine import StateMachine
from quadplay.storage import KeyValueStore

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(name)s: %(levelname)s: %(message)s',
    datefmt='%d.%m.%Y %H:%M:%S',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger('quadplay')


def main(config_file=None):
    config = ConfigManager(config_file)
    if not config.load():
        logger.warning("Using default configuration")

    controller = PlaybackController(
        audio=AudioPlayer(mpv_cmd=config.mpv_path),
        store=KeyValueStore(config.state_file),
        importer=LibraryImporter(config.library_dir),
        poll_interval=config.poll_interval,
    )
    StateMachine(config, controller).run()
    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))
