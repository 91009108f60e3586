"""
main.py
Entry point for the Home Assistant screen light sync application.
Wires the modules together and is the only place that exits the process.
"""

import argparse
import logging
import sys

from hass_light_sync.command_builder import CommandBuilder
from hass_light_sync.command_emitter import CommandEmitter
from hass_light_sync.config import DEFAULT_SETTINGS_PATH, Config
from hass_light_sync.errors import HassLightSyncError
from hass_light_sync.event_listener import EventListener
from hass_light_sync.gate import SharedGate
from hass_light_sync.hub.hub_session import HubSession
from hass_light_sync.sampling_loop import SamplingLoop
from hass_light_sync.screen.color_aggregator import ColorAggregator
from hass_light_sync.screen.frame_source import FrameSource
from hass_light_sync.signal_processing import ColorSmoother

log = logging.getLogger('hass_light_sync')


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Mirror the screen color onto a Home Assistant light.")
    ap.add_argument('--settings', default=DEFAULT_SETTINGS_PATH, help="Path to settings.json")
    ap.add_argument('--verbose', action='store_true', help="Enable debug logging")
    ap.add_argument('--debug-commands', action='store_true',
                    help="Log outgoing light commands (at most once per second)")
    return ap.parse_args(argv)


def build_loop(config, hub, frame_source, gate):
    width, height = frame_source.geometry()
    log.info("Capturing monitor %d at %dx%d", config.monitor_id, width, height)
    aggregator = ColorAggregator(width, height, config.skip_pixels)
    return SamplingLoop(
        gate=gate,
        frame_source=frame_source,
        aggregator=aggregator,
        smoother=ColorSmoother(config.smoothing_factor),
        builder=CommandBuilder(config),
        emitter=CommandEmitter(config, hub),
        grab_interval_ms=config.grab_interval,
    )


def run(args):
    log.info("hass-light-sync - Starting...")
    log.info("Reading config...")
    config = Config.load(args.settings)
    config.debug_commands = args.debug_commands
    log.info("Config loaded successfully!")

    frame_source = FrameSource(config.monitor_id)
    gate = SharedGate(False)
    hub = HubSession(config.api_endpoint, config.token)
    loop = build_loop(config, hub, frame_source, gate)

    log.info("Connecting to HASS ...")
    hub.connect()
    log.info("Connected ! (Home Assistant %s)", hub.ha_version or "unknown version")

    try:
        EventListener(hub, gate, config.trigger_entity_name).start()
        loop.run()
    finally:
        hub.close()


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )
    try:
        run(args)
    except HassLightSyncError as e:
        log.error("%s", e)
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("Exiting...")
        sys.exit(0)


if __name__ == '__main__':
    main()
