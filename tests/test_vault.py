"""Tests for vault module."""

import json
import os
import pytest
from pathlib import Path
import tempfile

from graph.errors import PreconditionError
from graph.model import FROM_TO, SOURCE_TARGET
from vault.settings import Settings, SettingsStore
from vault.store import Document, LockHeldError, VaultStore
from vault.workspace import active_view_type, require_graph_view


def _write(root: Path, rel_path: str, content: str = "") -> None:
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _write_workspace(root: Path, active: str, leaves) -> None:
    data = {
        "main": {
            "id": "main",
            "type": "split",
            "children": [
                {
                    "id": "tabs",
                    "type": "tabs",
                    "children": [
                        {"id": leaf_id, "type": "leaf", "state": {"type": view_type, "state": {}}}
                        for leaf_id, view_type in leaves
                    ],
                }
            ],
        },
        "active": active,
    }
    _write(root, ".obsidian/workspace.json", json.dumps(data))


class TestDocument:
    """Tests for Document identity."""

    def test_derived_fields(self):
        doc = Document("Notes/sub/My Note.md")

        assert doc.basename == "My Note"
        assert doc.name == "My Note.md"
        assert doc.extension == "md"
        assert doc.parent == "Notes/sub"

    def test_root_document(self):
        doc = Document("A.md")
        assert doc.parent == ""

    def test_equality_by_path(self):
        assert Document("A.md") == Document("A.md")
        assert len({Document("A.md"), Document("A.md")}) == 1


class TestVaultStore:
    """Tests for the filesystem document store."""

    def test_list_documents_sorted_and_filtered(self):
        """Test walk order, extension filter and excluded directories."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "b.md")
            _write(root, "a.md")
            _write(root, "Sub/c.MD")
            _write(root, "Sub/pic.png")
            _write(root, ".obsidian/app.md")
            _write(root, ".git/HEAD.md")

            store = VaultStore(root)

            assert [d.path for d in store.list_documents("md")] == ["Sub/c.MD", "a.md", "b.md"]
            assert "Sub/pic.png" in [d.path for d in store.list_documents()]

    def test_read_content(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "A.md", "hello [[B]]")

            assert VaultStore(root).read_content(Document("A.md")) == "hello [[B]]"

    def test_resource_location(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "A.md")

            assert VaultStore(root).resource_location(Document("A.md")).startswith("file://")

    def test_get_entity_at(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "Sub/A.md")
            store = VaultStore(root)

            assert store.get_entity_at("Sub/A.md") == Document("Sub/A.md")
            assert store.get_entity_at("Sub") is None
            assert store.get_entity_at("missing.md") is None

    def test_create_and_overwrite(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            store = VaultStore(root)

            created = store.create_entity("out/data.json", "first")
            assert (root / "out" / "data.json").read_text() == "first"

            with pytest.raises(FileExistsError):
                store.create_entity("out/data.json", "again")

            store.overwrite_entity(created, "second")
            assert (root / "out" / "data.json").read_text() == "second"

    def test_overwrite_missing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(FileNotFoundError):
                VaultStore(Path(tmpdir)).overwrite_entity(Document("nope.json"), "x")

    def test_path_escape_rejected(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ValueError):
                VaultStore(Path(tmpdir)).get_entity_at("../outside.md")

    def test_lock_is_exclusive(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            store = VaultStore(root)

            with store.lock("graph_data.json"):
                assert (root / "graph_data.json.lock").read_text() == str(os.getpid())
                with pytest.raises(LockHeldError) as excinfo:
                    with store.lock("graph_data.json"):
                        pass
                assert excinfo.value.lock_path == root.resolve() / "graph_data.json.lock"

            assert not (root / "graph_data.json.lock").exists()

    def test_stale_lock_taken_over(self):
        """A lock left by a process that is gone does not block later runs."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "graph_data.json.lock", "99999999")
            store = VaultStore(root)

            with store.lock("graph_data.json"):
                assert (root / "graph_data.json.lock").read_text() == str(os.getpid())

            assert not (root / "graph_data.json.lock").exists()

    def test_unreadable_lock_is_held(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "graph_data.json.lock", "not a pid")

            with pytest.raises(LockHeldError):
                with VaultStore(root).lock("graph_data.json"):
                    pass

            assert (root / "graph_data.json.lock").exists()

    def test_lock_parent_is_a_file(self):
        """Failing to create the lock is an OSError, not a held lock."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "sub", "plain file")

            with pytest.raises(OSError):
                with VaultStore(root).lock("sub/graph.json"):
                    pass

    def test_symlink_outside_vault_skipped(self):
        with tempfile.TemporaryDirectory() as tmpdir, tempfile.TemporaryDirectory() as outside:
            root = Path(tmpdir)
            _write(root, "A.md", "see [[B]]")
            secret = Path(outside) / "secret.md"
            secret.write_text("outside", encoding="utf-8")
            os.symlink(secret, root / "B.md")
            os.symlink(outside, root / "Linked")

            documents = VaultStore(root).list_documents("md")

            assert [d.path for d in documents] == ["A.md"]

    def test_symlink_inside_vault_kept(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, "A.md")
            os.symlink(root / "A.md", root / "B.md")

            assert [d.path for d in VaultStore(root).list_documents("md")] == ["A.md", "B.md"]


class TestSettings:
    """Tests for settings persistence."""

    def test_defaults_without_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = SettingsStore(Path(tmpdir)).load()

            assert settings.target_directory == ""
            assert settings.edge_format == SOURCE_TARGET
            assert settings.output_path == "graph_data.json"

    def test_save_and_load(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SettingsStore(Path(tmpdir))
            settings = Settings(target_directory="CardsPublic", edge_format=FROM_TO)

            store.save(settings)

            assert store.load() == settings
            assert "targetDirectory: CardsPublic" in store.path.read_text()

    def test_update_keeps_other_fields(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = SettingsStore(Path(tmpdir))
            store.save(Settings(target_directory="Notes", edge_format=FROM_TO))

            updated = store.update(target_directory="")

            assert updated.target_directory == ""
            assert updated.edge_format == FROM_TO
            assert store.load() == updated

    def test_unknown_keys_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, ".graph-export.yaml", "targetDirectory: Notes\ntheme: dark\n")

            assert SettingsStore(root).load().target_directory == "Notes"

    def test_invalid_edge_format(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, ".graph-export.yaml", "edgeFormat: arrows\n")

            with pytest.raises(ValueError):
                SettingsStore(root).load()

    def test_aliases(self):
        """Test that the file keys and the Python field names both populate settings."""
        by_alias = Settings.model_validate({"targetDirectory": "Cards", "edgeFormat": FROM_TO, "outputPath": "g.json"})
        by_name = Settings(target_directory="Cards", edge_format=FROM_TO, output_path="g.json")

        assert by_alias == by_name
        assert by_name.model_dump(by_alias=True) == {
            "targetDirectory": "Cards",
            "edgeFormat": FROM_TO,
            "outputPath": "g.json",
        }

    def test_blank_values_fall_back_to_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, ".graph-export.yaml", "targetDirectory:\nedgeFormat: ''\noutputPath:\n")

            assert SettingsStore(root).load() == Settings()

    def test_settings_are_immutable(self):
        with pytest.raises(ValueError):
            Settings().target_directory = "Cards"

    def test_non_mapping_rejected(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, ".graph-export.yaml", "- a\n- b\n")

            with pytest.raises(ValueError):
                SettingsStore(root).load()


class TestWorkspace:
    """Tests for the active view precondition."""

    def test_graph_view_active(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write_workspace(root, "leaf2", [("leaf1", "markdown"), ("leaf2", "graph")])

            assert active_view_type(root) == "graph"
            require_graph_view(root)

    def test_wrong_view_active(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write_workspace(root, "leaf1", [("leaf1", "markdown"), ("leaf2", "graph")])

            with pytest.raises(PreconditionError, match="markdown"):
                require_graph_view(root)

    def test_no_workspace(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)

            assert active_view_type(root) is None
            with pytest.raises(PreconditionError):
                require_graph_view(root)

    def test_corrupt_workspace(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            _write(root, ".obsidian/workspace.json", "{not json")

            assert active_view_type(root) is None
