import pytest

from stellarflow.parser.utils.strkey import encode_account, encode_contract


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session")
def account_a() -> str:
    return encode_account(bytes([1] * 32))


@pytest.fixture(scope="session")
def account_b() -> str:
    return encode_account(bytes([2] * 32))


@pytest.fixture(scope="session")
def contract_a() -> str:
    return encode_contract(bytes([10] * 32))


@pytest.fixture(scope="session")
def contract_b() -> str:
    return encode_contract(bytes([11] * 32))
