from .api import (
    AlQuranClient,
    ContentPair,
    ContentTarget,
    QuranApiError,
    QuranApiUnavailableError,
)
from .audio import AudioController, AudioPlaybackError
from .errors import PreconditionError, ReaderError
from .modal import ModalClosedError, ModalHost, SelectionModal
from .preferences import JsonFileStore, MemoryStore, PreferenceRecord, PreferenceStore
from .render import ContentMismatchError, RenderedView, render_pair
from .session import ReaderSession, SelectionState

__all__ = [
    "AlQuranClient",
    "ContentPair",
    "ContentTarget",
    "QuranApiError",
    "QuranApiUnavailableError",
    "AudioController",
    "AudioPlaybackError",
    "ReaderError",
    "PreconditionError",
    "ModalClosedError",
    "ModalHost",
    "SelectionModal",
    "JsonFileStore",
    "MemoryStore",
    "PreferenceRecord",
    "PreferenceStore",
    "ContentMismatchError",
    "RenderedView",
    "render_pair",
    "ReaderSession",
    "SelectionState",
]
