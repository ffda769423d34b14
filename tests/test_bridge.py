from cipher_cli.bridge import EditingSurface, SnapshotBridge
from cipher_cli.files import APP_JS
from cipher_cli.store import FileStore


class Surface:
    def __init__(self, files):
        self.files = files

    def current_files(self):
        return self.files


def test_surface_satisfies_protocol():
    assert isinstance(Surface({}), EditingSurface)


def test_reconcile_without_surface_uses_store():
    store = FileStore({"/src/A.js": "a"})

    assert SnapshotBridge(store).reconcile() == store.snapshot()


def test_reconcile_prefers_live_content():
    store = FileStore({"/src/A.js": "saved"})
    bridge = SnapshotBridge(store, Surface({"/src/A.js": "typed", APP_JS: "live app"}))

    files = bridge.reconcile()

    assert files["/src/A.js"] == "typed"
    assert files[APP_JS] == "live app"


def test_reconcile_does_not_mutate_store():
    store = FileStore({"/src/A.js": "saved"})
    SnapshotBridge(store, Surface({"/src/A.js": "typed"})).reconcile()

    assert store.get("/src/A.js") == "saved"


def test_structure_comes_from_store():
    store = FileStore({"/src/A.js": "a"})
    surface = Surface({"/src/Ghost.js": "deleted already", "/README.md": "x"})

    files = SnapshotBridge(store, surface).reconcile()

    assert "/src/Ghost.js" not in files
    assert "/README.md" not in files
    assert files["/src/A.js"] == "a"


def test_surface_without_content_falls_back():
    store = FileStore({"/src/A.js": "a"})
    bridge = SnapshotBridge(store, Surface(None))

    assert bridge.reconcile()["/src/A.js"] == "a"
