"""End-to-end tests for the stacks orchestrator."""
import asyncio

import pytest

from core.catalog import SignatureCatalog
from core.stacks import Stacks
from fetch.execution_context import LocalExecutionContext
from models.signature import SignatureTest
from models.stack import StackEntry


def _document(headers):
    return {
        "method": "Network.responseReceived",
        "params": {"type": "Document", "response": {"headers": headers}},
    }


@pytest.fixture
def catalog():
    async def hangs(window):
        await asyncio.Event().wait()

    return SignatureCatalog.from_tests({
        "Hang": SignatureTest(id="hang", test=hangs),
        "Lib": SignatureTest(id="lib", test=lambda window: {"version": 3}, npm_name="lib-npm"),
    })


@pytest.mark.asyncio
async def test_collects_library_then_server(catalog):
    stacks = Stacks(catalog)
    log = [_document({"Server": "cloudflare"})]

    entries = await stacks.get_artifact(LocalExecutionContext({}), log)

    assert entries == [
        StackEntry(detector="js", id="lib", name="Lib", version="3", npm_name="lib-npm"),
        StackEntry(detector="server", id="cloudflare", name="Cloudflare"),
    ]
    assert [e.to_dict() for e in entries] == [
        {"detector": "js", "id": "lib", "name": "Lib", "version": "3", "npm": "lib-npm"},
        {"detector": "server", "id": "cloudflare", "name": "Cloudflare"},
    ]


@pytest.mark.asyncio
async def test_nothing_detected():
    stacks = Stacks(SignatureCatalog.from_tests({}))
    entries = await stacks.get_artifact(LocalExecutionContext({}), [])
    assert entries == []


@pytest.mark.asyncio
async def test_rejected_evaluation_yields_empty_result(catalog):
    class DeadContext:
        async def evaluate(self, function, args=(), deps=()):
            raise RuntimeError("Cannot find context with specified id")

    stacks = Stacks(catalog)
    entries = await stacks.get_artifact(DeadContext(), [_document({"server": "nginx"})])

    assert entries == []
    with pytest.raises(RuntimeError):
        await stacks.collect_stacks(DeadContext(), [])


@pytest.mark.asyncio
async def test_malformed_log_yields_empty_result():
    stacks = Stacks(SignatureCatalog.from_tests({
        "Lib": SignatureTest(id="lib", test=lambda window: {"version": "1.0"}),
    }))
    log = [{"method": "Network.responseReceived", "params": {"type": "Document"}}]

    assert await stacks.get_artifact(LocalExecutionContext({}), log) == []


@pytest.mark.asyncio
async def test_unusable_version_is_dropped_without_losing_other_entries():
    stacks = Stacks(SignatureCatalog.from_tests({
        "jQuery": SignatureTest(id="jquery", test=lambda window: {"version": "3.6.0"}),
        "Bytes": SignatureTest(id="bytes", test=lambda window: {"version": b"1.0"}),
        "Opaque": SignatureTest(id="opaque", test=lambda window: {"version": object()}),
    }))

    entries = await stacks.get_artifact(LocalExecutionContext({}), [_document({"server": "nginx"})])

    assert entries == [
        StackEntry(detector="js", id="jquery", name="jQuery", version="3.6.0"),
        StackEntry(detector="js", id="bytes", name="Bytes"),
        StackEntry(detector="js", id="opaque", name="Opaque"),
        StackEntry(detector="server", id="nginx", name="Nginx"),
    ]


@pytest.mark.asyncio
async def test_catalog_entry_without_id_is_skipped():
    stacks = Stacks(SignatureCatalog.from_tests({
        "jQuery": SignatureTest(id="jquery", test=lambda window: {"version": "3.6.0"}),
        "Nameless": SignatureTest(id="", test=lambda window: {"version": "1.0"}),
    }))

    entries = await stacks.get_artifact(LocalExecutionContext({}), [_document({"server": "nginx"})])

    assert [(e.detector, e.id) for e in entries] == [("js", "jquery"), ("server", "nginx")]


@pytest.mark.asyncio
async def test_remote_result_without_id_is_skipped():
    class PageContext:
        async def evaluate(self, function, args=(), deps=()):
            return [
                {"id": "", "name": "Broken", "version": None, "npm": None},
                {"id": "vue", "name": "Vue", "version": "3.4.0", "npm": "vue"},
            ]

    stacks = Stacks(SignatureCatalog(source="var x = {};", binding="x"))
    entries = await stacks.get_artifact(PageContext(), [_document({"server": "nginx"})])

    assert [(e.detector, e.id) for e in entries] == [("js", "vue"), ("server", "nginx")]



@pytest.mark.asyncio
async def test_custom_server_table(catalog):
    from models.signature import ServerSignature

    stacks = Stacks(
        SignatureCatalog.from_tests({}),
        server_signatures=[ServerSignature(id="caddy", name="Caddy", headers={"server": "caddy"})],
    )
    entries = await stacks.get_artifact(LocalExecutionContext({}), [_document({"server": "Caddy"})])
    assert entries == [StackEntry(detector="server", id="caddy", name="Caddy")]
