"""
hub_session.py
Home Assistant WebSocket API client.

One connection carries both the event subscription and the service calls.
A reader thread owns recv(): it hands events to their subscription callbacks
and resolves the Future of the request a result message answers.
"""

import itertools
import json
import logging
import threading
from concurrent.futures import Future

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import connect as ws_connect

from hass_light_sync.errors import HubAuthError, HubCommandError, HubConnectionError

log = logging.getLogger(__name__)


class HubSession:
    def __init__(self, url, token, connect=ws_connect):
        self.url = url
        self._token = token
        self._connect = connect
        self._ws = None
        self._reader = None
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._pending = {}
        self._subscriptions = {}
        self._closed = False
        self.ha_version = None

    # --- Handshake ---
    def connect(self):
        """Open the socket, authenticate, and start the reader thread."""
        try:
            self._ws = self._connect(self.url)
        except (OSError, WebSocketException) as e:
            raise HubConnectionError(f"Connection to Home Assistant failed: {e}") from e

        try:
            hello = self._recv_json()
            if hello.get('type') != 'auth_required':
                raise ValueError(f"unexpected greeting {hello}")
            self._send_json({'type': 'auth', 'access_token': self._token})
            reply = self._recv_json()
        except (ConnectionClosed, OSError, ValueError) as e:
            self._ws.close()
            raise HubConnectionError(f"Connection to Home Assistant failed: {e}") from e

        if reply.get('type') == 'auth_invalid':
            self._ws.close()
            raise HubAuthError(
                f"Authentication rejected by Home Assistant: {reply.get('message', 'invalid token')}"
            )
        if reply.get('type') != 'auth_ok':
            self._ws.close()
            raise HubConnectionError(f"Unexpected auth reply from Home Assistant: {reply}")
        self.ha_version = reply.get('ha_version')

        self._reader = threading.Thread(target=self._read_loop, name='hub-reader', daemon=True)
        self._reader.start()

    def close(self):
        with self._lock:
            self._closed = True
        if self._ws is not None:
            self._ws.close()

    @property
    def connected(self):
        return self._reader is not None and self._reader.is_alive()

    # --- Requests ---
    def subscribe_events(self, event_type, callback):
        """
        Subscribe to an event type. callback(message) runs on the reader thread
        for every event; message is the raw {"id", "type": "event", "event"} dict.
        Returns the subscription id.
        """
        msg_id, future = self._request(
            {'type': 'subscribe_events', 'event_type': event_type},
            subscription=callback,
        )
        self._result(msg_id, future)
        return msg_id

    def call_service(self, domain, service, service_data=None):
        msg = {'type': 'call_service', 'domain': domain, 'service': service}
        if service_data is not None:
            msg['service_data'] = service_data
        msg_id, future = self._request(msg)
        return self._result(msg_id, future)

    def _request(self, msg, subscription=None):
        future = Future()
        with self._lock:
            if self._closed or self._ws is None:
                raise HubConnectionError("Hub session is not connected")
            msg_id = next(self._ids)
            self._pending[msg_id] = future
            if subscription is not None:
                self._subscriptions[msg_id] = subscription
            msg = dict(msg, id=msg_id)
            try:
                self._send_json(msg)
            except (OSError, WebSocketException) as e:
                self._pending.pop(msg_id, None)
                self._subscriptions.pop(msg_id, None)
                raise HubConnectionError(f"Connection to Home Assistant failed: {e}") from e
        return msg_id, future

    def _result(self, msg_id, future):
        result = future.result()
        if not result.get('success', False):
            error = result.get('error') or {}
            if not isinstance(error, dict):
                error = {'message': str(error)}
            with self._lock:
                self._subscriptions.pop(msg_id, None)
            raise HubCommandError(
                f"Home Assistant rejected request {msg_id}: "
                f"{error.get('code', 'unknown_error')} {error.get('message', '')}".strip()
            )
        return result.get('result')

    # --- Transport ---
    def _send_json(self, msg):
        self._ws.send(json.dumps(msg))

    def _recv_json(self):
        msg = json.loads(self._ws.recv())
        if not isinstance(msg, dict):
            raise ValueError(f"expected a JSON object, got {msg!r}")
        return msg

    def _read_loop(self):
        reason = "connection closed"
        try:
            for raw in self._ws:
                try:
                    msg = json.loads(raw)
                except ValueError:
                    log.warning("Dropping non-JSON message from Home Assistant: %r", raw[:200])
                    continue
                if not isinstance(msg, dict):
                    log.warning("Dropping malformed message from Home Assistant: %r", msg)
                    continue
                self._dispatch(msg)
        except ConnectionClosed as e:
            reason = str(e)
        except (OSError, WebSocketException) as e:
            reason = str(e)
            log.error("Home Assistant connection lost: %s", e)
        finally:
            self._fail_pending(reason)

    def _dispatch(self, msg):
        msg_type = msg.get('type')
        msg_id = msg.get('id')
        if not isinstance(msg_id, int):
            log.warning("Dropping %r message without a usable id: %r", msg_type, msg_id)
            return
        if msg_type == 'event':
            with self._lock:
                callback = self._subscriptions.get(msg_id)
            if callback is not None:
                callback(msg)
        elif msg_type == 'result':
            with self._lock:
                future = self._pending.pop(msg_id, None)
            if future is not None:
                future.set_result(msg)
        elif msg_type == 'pong':
            with self._lock:
                future = self._pending.pop(msg_id, None)
            if future is not None:
                future.set_result({'success': True})
        else:
            log.debug("Ignoring message of type %r", msg_type)

    def _fail_pending(self, reason):
        with self._lock:
            self._closed = True
            pending = list(self._pending.values())
            self._pending.clear()
            self._subscriptions.clear()
        for future in pending:
            future.set_exception(HubConnectionError(f"Connection to Home Assistant lost: {reason}"))

    def ping(self):
        """Round-trip a ping message. Raises HubError if the connection is gone."""
        msg_id, future = self._request({'type': 'ping'})
        self._result(msg_id, future)
        return True
