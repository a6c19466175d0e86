import json

import httpx

from conftest import RelayRecorder
from lanshare.models import ConnectivityState, RelayOutcome
from lanshare.relay import SyncForwarder

URL = "http://aggregator.test/api/submit"


def test_offline_skips_without_network(record_a, relay_ok):
    forwarder = SyncForwarder(URL, client=relay_ok.client())
    assert forwarder.relay(record_a, ConnectivityState.OFFLINE) is RelayOutcome.SKIPPED_OFFLINE
    assert relay_ok.requests == []


def test_online_posts_single_record(record_a, relay_ok):
    forwarder = SyncForwarder(URL, client=relay_ok.client())
    assert forwarder.relay(record_a, ConnectivityState.ONLINE) is RelayOutcome.RELAYED

    [request] = relay_ok.requests
    assert request.method == "POST"
    assert str(request.url) == URL
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == record_a.model_dump()


def test_http_error_is_failed_not_retried(record_a):
    recorder = RelayRecorder(status=503)
    forwarder = SyncForwarder(URL, client=recorder.client())
    assert forwarder.relay(record_a, ConnectivityState.ONLINE) is RelayOutcome.FAILED
    assert len(recorder.requests) == 1


def test_transport_error_is_failed(record_a):
    recorder = RelayRecorder(exc=httpx.ConnectError("connection refused"))
    forwarder = SyncForwarder(URL, client=recorder.client())
    assert forwarder.relay(record_a, ConnectivityState.ONLINE) is RelayOutcome.FAILED
    assert len(recorder.requests) == 1


def test_unexpected_error_never_escapes(record_a):
    recorder = RelayRecorder(exc=ValueError("something odd"))
    forwarder = SyncForwarder(URL, client=recorder.client())
    assert forwarder.relay(record_a, ConnectivityState.ONLINE) is RelayOutcome.FAILED


def test_close_leaves_injected_client_open(relay_ok):
    client = relay_ok.client()
    SyncForwarder(URL, client=client).close()
    assert not client.is_closed


def test_close_closes_owned_client():
    forwarder = SyncForwarder(URL, timeout=None)
    forwarder.close()
    assert forwarder._client.is_closed


def test_bool_state_is_accepted(record_a, relay_ok):
    forwarder = SyncForwarder(URL, client=relay_ok.client())
    assert forwarder.relay(record_a, False) is RelayOutcome.SKIPPED_OFFLINE
    assert forwarder.relay(record_a, True) is RelayOutcome.RELAYED
    assert len(relay_ok.requests) == 1


def test_unknown_state_is_failed_without_request(record_a, relay_ok):
    forwarder = SyncForwarder(URL, client=relay_ok.client())
    assert forwarder.relay(record_a, "sometimes") is RelayOutcome.FAILED
    assert relay_ok.requests == []


def test_owned_client_has_no_timeout_by_default():
    forwarder = SyncForwarder(URL)
    assert forwarder._client.timeout == httpx.Timeout(None)
    forwarder.close()


def test_owned_client_uses_given_timeout():
    forwarder = SyncForwarder(URL, timeout=2.5)
    assert forwarder._client.timeout == httpx.Timeout(2.5)
    forwarder.close()
