import logging

import pytest
import requests
from eth_abi import encode

from apr.abi import BOOSTED_MASTERCHEF_ABI, LP_TOKEN_ABI, get_function
from apr.errors import ContractCallError, TransientTransportError
from apr.rpc import RpcClient, to_block_tag

MASTERCHEF = "0x4483f0b6e2f5486d06958c20f8c39a7abe87bf8f"


def _result(types, values):
    return {"jsonrpc": "2.0", "id": 1, "result": "0x" + encode(types, values).hex()}


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    sleeps = []
    monkeypatch.setattr("apr.rpc.time.sleep", sleeps.append)
    return sleeps


def test_to_block_tag():
    assert to_block_tag(255) == "0xff"
    assert to_block_tag("latest") == "latest"


def test_encode_call_uses_function_selector():
    fn = get_function(BOOSTED_MASTERCHEF_ABI, "poolInfo")
    data = fn.encode_call([3])
    assert fn.signature == "poolInfo(uint256)"
    assert data.startswith("0x")
    assert data.endswith("0" * 63 + "3")
    assert len(data) == 2 + 8 + 64


def test_call_decodes_scalar(config, fake_session):
    session = fake_session([_result(["uint256"], [10**18])])
    client = RpcClient(config, session=session)

    value = client.call(MASTERCHEF, BOOSTED_MASTERCHEF_ABI, "joePerSec", block=1000)

    assert value == 10**18
    payload = session.calls[0]["json"]
    assert payload["method"] == "eth_call"
    assert payload["jsonrpc"] == "2.0"
    assert payload["params"][0]["to"] == MASTERCHEF
    assert payload["params"][1] == hex(1000)


def test_call_decodes_named_outputs(config, fake_session):
    session = fake_session([_result(["uint112", "uint112", "uint32"], [5, 7, 9])])
    client = RpcClient(config, session=session)

    value = client.call(MASTERCHEF, LP_TOKEN_ABI, "getReserves")

    assert value == {"_reserve0": 5, "_reserve1": 7, "_blockTimestampLast": 9}


def test_timeout_retries_identical_call(config, fake_session, no_sleep):
    session = fake_session(
        [
            requests.Timeout("timed out"),
            requests.ConnectionError("connection reset by peer"),
            _result(["uint256"], [42]),
        ]
    )
    client = RpcClient(config, session=session)

    value = client.call(MASTERCHEF, BOOSTED_MASTERCHEF_ABI, "totalAllocPoint", block=7)

    assert value == 42
    assert len(session.calls) == 3
    assert session.calls[0]["json"] == session.calls[1]["json"] == session.calls[2]["json"]
    assert no_sleep == [0.01, 0.02]


def test_retries_are_bounded(config, fake_session, caplog):
    session = fake_session([requests.Timeout("timed out")] * config.rpc_max_attempts)
    client = RpcClient(config, session=session)

    with caplog.at_level(logging.ERROR, logger="apr.rpc"):
        value = client.call(MASTERCHEF, BOOSTED_MASTERCHEF_ABI, "poolLength")

    assert value is None
    assert len(session.calls) == config.rpc_max_attempts
    assert "poolLength" in caplog.text


def test_non_transient_fault_is_logged_once(config, fake_session, caplog):
    session = fake_session(
        [{"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "execution reverted"}}]
    )
    client = RpcClient(config, session=session)

    with caplog.at_level(logging.ERROR, logger="apr.rpc"):
        value = client.call(MASTERCHEF, BOOSTED_MASTERCHEF_ABI, "joePerSec")

    assert value is None
    assert len(session.calls) == 1
    assert "joePerSec" in caplog.text
    assert MASTERCHEF in caplog.text
    assert "execution reverted" in caplog.text


def test_null_result_is_missing_value(config, fake_session):
    session = fake_session([{"jsonrpc": "2.0", "id": 1, "result": None}])
    client = RpcClient(config, session=session)

    assert client.call(MASTERCHEF, BOOSTED_MASTERCHEF_ABI, "joePerSec") is None
    assert len(session.calls) == 1


def test_block_number(config, fake_session):
    session = fake_session([{"jsonrpc": "2.0", "id": 1, "result": "0x10"}])
    client = RpcClient(config, session=session)

    assert client.block_number() == 16
    assert session.calls[0]["json"]["method"] == "eth_blockNumber"


def test_block_number_error_propagates(config, fake_session):
    session = fake_session([{"jsonrpc": "2.0", "id": 1, "error": {"message": "boom"}}])
    client = RpcClient(config, session=session)

    with pytest.raises(ContractCallError):
        client.block_number()


def test_non_object_body_is_missing_value(config, fake_session):
    session = fake_session([["oops"]])
    client = RpcClient(config, session=session)

    assert client.call(MASTERCHEF, BOOSTED_MASTERCHEF_ABI, "joePerSec") is None
    assert len(session.calls) == 1


def test_non_string_result_is_missing_value(config, fake_session, caplog):
    session = fake_session([{"jsonrpc": "2.0", "id": 1, "result": 5}])
    client = RpcClient(config, session=session)

    with caplog.at_level(logging.ERROR, logger="apr.rpc"):
        value = client.call(MASTERCHEF, BOOSTED_MASTERCHEF_ABI, "joePerSec")

    assert value is None
    assert "empty result" in caplog.text


def test_http_error_on_call_is_missing_value(config, fake_session, fake_response):
    session = fake_session([fake_response({}, status_code=500)])
    client = RpcClient(config, session=session)

    assert client.call(MASTERCHEF, BOOSTED_MASTERCHEF_ABI, "poolLength") is None
    assert len(session.calls) == 1


def test_block_number_http_error_raises_contract_call_error(config, fake_session, fake_response):
    session = fake_session([fake_response({}, status_code=503)])
    client = RpcClient(config, session=session)

    with pytest.raises(ContractCallError, match="HTTPError"):
        client.block_number()


def test_block_number_rejects_malformed_result(config, fake_session):
    session = fake_session(
        [
            {"jsonrpc": "2.0", "id": 1, "result": "not-hex"},
            {"jsonrpc": "2.0", "id": 1, "result": 16},
            ["oops"],
        ]
    )
    client = RpcClient(config, session=session)

    for _ in range(3):
        with pytest.raises(ContractCallError):
            client.block_number()


def test_block_number_retries_exhausted_raise(config, fake_session):
    session = fake_session([requests.Timeout("timed out")] * config.rpc_max_attempts)
    client = RpcClient(config, session=session)

    with pytest.raises(TransientTransportError):
        client.block_number()
    assert len(session.calls) == config.rpc_max_attempts
