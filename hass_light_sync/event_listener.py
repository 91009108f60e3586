"""
event_listener.py
Arms and disarms the sampling loop from the state of a Home Assistant trigger entity.
"""

import logging

from hass_light_sync.errors import HubError

log = logging.getLogger(__name__)

EVENT_TYPE = 'state_changed'


class EventListener:
    def __init__(self, hub, gate, trigger_entity):
        self.hub = hub
        self.gate = gate
        self.trigger_entity = trigger_entity
        self.subscription_id = None
        self.subscription_error = None

    def start(self):
        """
        Subscribe to state changes. Returns False if the subscription could not be
        set up; the gate then keeps its last value for the rest of the run.
        """
        try:
            self.subscription_id = self.hub.subscribe_events(EVENT_TYPE, self.handle_event)
        except HubError as e:
            self.subscription_error = e
            log.error("Event subscription failed, light sync gate is frozen: %s", e)
            return False
        log.info("Event subscribed : %s", self.subscription_id)
        return True

    def handle_event(self, message):
        try:
            event = message['event']
            data = event['data']
            entity_id = data['entity_id']
        except (KeyError, TypeError):
            log.warning("Skipping malformed event: %r", message)
            return
        if entity_id != self.trigger_entity:
            return

        new_state = data.get('new_state')
        if isinstance(new_state, dict) and new_state.get('state') is not None:
            state = str(new_state['state'])
        else:
            state = 'None'

        self.gate.set(state == 'on')
        log.info(
            "Event : id %s, at %s, entity: %s, new_state: %s",
            message.get('id'), event.get('time_fired'), entity_id, state,
        )
