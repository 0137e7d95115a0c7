"""
Unit tests for the credential store adapters and the credential codec.
"""

from __future__ import annotations

import json
from unittest.mock import Mock

import pytest

from conftest import MemoryStore
from max_confirmator.api.errors import CredentialStoreError
from max_confirmator.config.settings import Settings
from max_confirmator.models.credential import Credential
from max_confirmator.store import (
    FileParameterStore,
    SSMParameterStore,
    build_store,
    dump_credentials,
    load_credentials,
    persist_in_background,
    wait_for_pending_writes,
)

PARAMETER = "/SNCFMaxJeune/users"


class TestSSMParameterStore:
    @pytest.mark.asyncio
    async def test_get_reads_decrypted_value(self):
        client = Mock()
        client.get_parameter.return_value = {"Parameter": {"Name": PARAMETER, "Value": "[]"}}
        store = SSMParameterStore("eu-west-3", client=client)

        assert await store.get(PARAMETER) == "[]"
        client.get_parameter.assert_called_once_with(Name=PARAMETER, WithDecryption=True)

    @pytest.mark.asyncio
    async def test_get_returns_none_on_error(self, caplog):
        client = Mock()
        client.get_parameter.side_effect = RuntimeError("ParameterNotFound")
        store = SSMParameterStore("eu-west-3", client=client)

        assert await store.get(PARAMETER) is None
        assert "ParameterNotFound" in caplog.text

    @pytest.mark.asyncio
    async def test_put_writes_secure_string(self):
        client = Mock()
        store = SSMParameterStore("eu-west-3", client=client)

        await store.put(PARAMETER, "[]")

        client.put_parameter.assert_called_once_with(
            Name=PARAMETER, Value="[]", Type="SecureString", Overwrite=True
        )

    @pytest.mark.asyncio
    async def test_put_swallows_errors(self, caplog):
        client = Mock()
        client.put_parameter.side_effect = RuntimeError("AccessDenied")
        store = SSMParameterStore("eu-west-3", client=client)

        await store.put(PARAMETER, "[]")

        assert "AccessDenied" in caplog.text


class TestFileParameterStore:
    @pytest.mark.asyncio
    async def test_put_then_get(self, tmp_path):
        store = FileParameterStore(tmp_path / "nested" / "params.json")

        await store.put(PARAMETER, "[1]")
        await store.put("/other", "x")

        assert await store.get(PARAMETER) == "[1]"
        assert json.loads((tmp_path / "nested" / "params.json").read_text()) == {PARAMETER: "[1]", "/other": "x"}

    @pytest.mark.asyncio
    async def test_missing_file_or_key_is_none(self, tmp_path):
        store = FileParameterStore(tmp_path / "params.json")
        assert await store.get(PARAMETER) is None

        (tmp_path / "params.json").write_text("{}")
        assert await store.get(PARAMETER) is None

    @pytest.mark.asyncio
    async def test_malformed_file_never_raises(self, tmp_path):
        path = tmp_path / "params.json"
        path.write_text("[not an object")
        store = FileParameterStore(path)

        assert await store.get(PARAMETER) is None
        await store.put(PARAMETER, "[]")
        assert path.read_text() == "[not an object"


class TestBuildStore:
    def test_selects_backend(self, tmp_path):
        assert isinstance(build_store(Settings()), SSMParameterStore)
        file_store = build_store(Settings(credential_store="file", credentials_file=tmp_path / "c.json"))
        assert isinstance(file_store, FileParameterStore)
        assert file_store.path == tmp_path / "c.json"


class TestLoadCredentials:
    @pytest.mark.asyncio
    async def test_decodes_and_drops_entries_without_token(self, caplog):
        store = MemoryStore(
            {
                PARAMETER: json.dumps(
                    [
                        {"name": "Alice", "accessToken": "A1", "datadomeCookie": "DD", "email": "a@x.test"},
                        {"name": "No token"},
                        "garbage",
                        {"accessToken": "B1"},
                    ]
                )
            }
        )

        credentials = await load_credentials(store, PARAMETER)

        assert [credential.access_token for credential in credentials] == ["A1", "B1"]
        assert credentials[0].datadome_cookie == "DD"
        assert credentials[0].extra == {"email": "a@x.test"}
        assert "Dropping stored user #1" in caplog.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stored", [None, "", "{oops", '"a string"', '{"accessToken": "A1"}'])
    async def test_unusable_values_raise(self, stored):
        with pytest.raises(CredentialStoreError) as excinfo:
            await load_credentials(MemoryStore({PARAMETER: stored}), PARAMETER)
        assert excinfo.value.parameter_name == PARAMETER

    def test_dump_keeps_unknown_keys(self):
        credential = Credential.from_dict({"accessToken": "A1", "email": "a@x.test"})
        credential.access_token = "A2"

        assert json.loads(dump_credentials([credential])) == [{"accessToken": "A2", "email": "a@x.test"}]


class TestPersistInBackground:
    @pytest.mark.asyncio
    async def test_write_is_dispatched_and_awaitable(self):
        store = MemoryStore()

        task = persist_in_background(store, PARAMETER, "[]")
        assert not task.done()
        await wait_for_pending_writes()

        assert store.puts == [(PARAMETER, "[]")]

    @pytest.mark.asyncio
    async def test_nothing_pending_is_a_no_op(self):
        await wait_for_pending_writes()
