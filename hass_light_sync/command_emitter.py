"""
command_emitter.py
Sends light commands to Home Assistant over the hub session.
"""

import logging
import time

from hass_light_sync.errors import HubCommandError, HubError

log = logging.getLogger(__name__)

LIGHT_DOMAIN = 'light'
TURN_ON_SERVICE = 'turn_on'


class CommandEmitter:
    def __init__(self, config, hub):
        self.config = config
        self.hub = hub
        self._last_debug_print = 0.0

    def send(self, command):
        payload = command.service_data()

        # Optional debug print (rate-limited)
        if getattr(self.config, 'debug_commands', False):
            now = time.time()
            if now - self._last_debug_print > 1.0:
                log.info("%s.%s %s", LIGHT_DOMAIN, TURN_ON_SERVICE, payload)
                self._last_debug_print = now

        try:
            self.hub.call_service(LIGHT_DOMAIN, TURN_ON_SERVICE, payload)
        except HubCommandError:
            raise
        except HubError as e:
            raise HubCommandError(f"Connection to Home Assistant failed: {e}") from e
