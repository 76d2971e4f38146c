"""Shared test fixtures for the fuzzcomp test suite."""

import pytest

from fuzzcomp.core.completion.controller import CompletionController
from fuzzcomp.core.config import CompletionPreferences, PreferenceStore
from fuzzcomp.core.document import Document, Workspace
from fuzzcomp.core.editor import InMemoryEditor
from fuzzcomp.core.sources.registry import ProviderRegistry
from tests.helpers import FakeClock, StaticProvider


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def document() -> Document:
    return Document(1, ["let "], filetype="ts")


@pytest.fixture
def workspace(document: Document) -> Workspace:
    return Workspace([document])


@pytest.fixture
def editor(workspace: Workspace) -> InMemoryEditor:
    ed = InMemoryEditor(workspace, bufnr=1)
    ed.set_cursor(1, 4)
    return ed


@pytest.fixture
def provider() -> StaticProvider:
    return StaticProvider(["foo", "for", "bar"], trigger_characters=["."], filetypes=["ts"])


@pytest.fixture
def registry(provider: StaticProvider) -> ProviderRegistry:
    return ProviderRegistry([provider])


@pytest.fixture
def preferences() -> PreferenceStore:
    return PreferenceStore(CompletionPreferences(_env_file=None))  # type: ignore[call-arg]


@pytest.fixture
def controller(
    editor: InMemoryEditor,
    workspace: Workspace,
    registry: ProviderRegistry,
    preferences: PreferenceStore,
    clock: FakeClock,
) -> CompletionController:
    ctrl = CompletionController(editor, workspace, registry, preferences, clock=clock)
    # The editor starts in insert mode
    ctrl.insert_mode = True
    editor.attach(ctrl.dispatch)
    return ctrl
