"""Debug tool: verify settings.json against a live Home Assistant instance.

    python tools/check_hub_connection.py --settings settings.json [--blink]

Connects, authenticates, pings, listens to the trigger entity for a while and
prints every state change it sees. With --blink, sends one red light command.
"""

from __future__ import annotations

import argparse
import logging
import time

from hass_light_sync.command_builder import CommandBuilder
from hass_light_sync.command_emitter import CommandEmitter
from hass_light_sync.config import Config
from hass_light_sync.event_listener import EventListener
from hass_light_sync.gate import SharedGate
from hass_light_sync.hub.hub_session import HubSession


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument('--settings', default='settings.json')
    ap.add_argument('--listen', type=float, default=20.0, help="Seconds to watch the trigger entity")
    ap.add_argument('--blink', action='store_true')
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(message)s')
    cfg = Config.load(args.settings)

    hub = HubSession(cfg.api_endpoint, cfg.token)
    hub.connect()
    print(f"connected: Home Assistant {hub.ha_version}")
    t0 = time.time()
    hub.ping()
    print(f"ping: {(time.time() - t0) * 1000:.1f} ms")

    if args.blink:
        CommandEmitter(cfg, hub).send(CommandBuilder(cfg).build((255, 0, 0)))
        print(f"sent red to {cfg.light_entity_name}")

    gate = SharedGate()
    listener = EventListener(hub, gate, cfg.trigger_entity_name)
    if not listener.start():
        raise SystemExit(f"subscription failed: {listener.subscription_error}")

    print(f"watching {cfg.trigger_entity_name} for {args.listen:.0f}s, toggle it now")
    end = time.time() + args.listen
    last = None
    while time.time() < end and hub.connected:
        armed = gate.get()
        if armed != last:
            print(f"gate={'armed' if armed else 'paused'}")
            last = armed
        time.sleep(0.1)
    if not hub.connected:
        raise SystemExit("connection to Home Assistant lost")
    hub.close()


if __name__ == '__main__':
    main()
