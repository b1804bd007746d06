"""
Tests for document and folder endpoints, including edit enforcement on save.
"""

import pytest

from codecollab.collaboration.permissions import ProjectRole
from codecollab.models import Document, Folder


@pytest.fixture
def editor(factory, project):
    user = factory.user(name="Eddie Editor")
    factory.member(project, user, ProjectRole.EDITOR)
    return user


@pytest.fixture
def viewer(factory, project):
    user = factory.user(name="Vera Viewer")
    factory.member(project, user, ProjectRole.VIEWER)
    return user


class TestDocumentCrud:
    """Test suite for creating, listing, renaming, moving and deleting documents."""

    def test_create_root_document_with_default_content(self, client, db_session, owner, project, auth_headers):
        # Act
        response = client.post(
            "/api/documents",
            json={"projectId": project.id, "name": "main.PY", "language": "Python"},
            headers=auth_headers(owner),
        )

        # Assert
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "main.PY"
        assert data["language"] == "python"
        assert data["folderId"] is None
        assert data["content"] == "// Start coding here...\n"

    def test_create_document_in_folder(self, client, db_session, factory, project, editor, auth_headers):
        folder = factory.folder(project)

        response = client.post(
            "/api/documents",
            json={"projectId": project.id, "folderId": folder.id, "name": "app.js"},
            headers=auth_headers(editor),
        )

        assert response.status_code == 201
        assert response.json()["folderId"] == folder.id
        assert response.json()["language"] == "javascript"

    def test_viewer_cannot_create_documents(self, client, db_session, project, viewer, auth_headers):
        response = client.post(
            "/api/documents", json={"projectId": project.id, "name": "x.js"}, headers=auth_headers(viewer)
        )

        assert response.status_code == 403
        assert response.json()["error"] == "You do not have permission to create documents"

    def test_outsider_cannot_create_documents(self, client, db_session, factory, project, auth_headers):
        response = client.post(
            "/api/documents", json={"projectId": project.id, "name": "x.js"}, headers=auth_headers(factory.user())
        )

        assert response.status_code == 403

    def test_folder_from_other_project_is_rejected(self, client, db_session, factory, owner, project, auth_headers):
        other = factory.project(owner, name="Other")
        foreign_folder = factory.folder(other)

        response = client.post(
            "/api/documents",
            json={"projectId": project.id, "folderId": foreign_folder.id, "name": "x.js"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 400

    def test_list_project_documents(self, client, db_session, factory, project, viewer, auth_headers):
        factory.document(project, name="one.js")
        factory.document(project, name="two.js")

        response = client.get(f"/api/documents/project/{project.id}", headers=auth_headers(viewer))

        assert response.status_code == 200
        assert {document["name"] for document in response.json()} == {"one.js", "two.js"}

    def test_get_document_as_member(self, client, db_session, factory, project, viewer, auth_headers):
        document = factory.document(project, content="print(1)")

        response = client.get(f"/api/documents/{document.id}", headers=auth_headers(viewer))

        assert response.status_code == 200
        assert response.json()["content"] == "print(1)"

    def test_get_document_as_outsider(self, client, db_session, factory, project, auth_headers):
        document = factory.document(project)

        response = client.get(f"/api/documents/{document.id}", headers=auth_headers(factory.user()))

        assert response.status_code == 403

    def test_get_missing_document(self, client, db_session, owner, auth_headers):
        response = client.get("/api/documents/missing", headers=auth_headers(owner))

        assert response.status_code == 404
        assert response.json()["error"] == "Document not found"

    def test_rename_document(self, client, db_session, factory, project, editor, auth_headers):
        document = factory.document(project)

        response = client.put(
            f"/api/documents/{document.id}/rename", json={"name": "renamed.js"}, headers=auth_headers(editor)
        )

        assert response.status_code == 200
        assert response.json()["name"] == "renamed.js"

    def test_move_document_into_folder_and_back(self, client, db_session, factory, owner, project, auth_headers):
        folder = factory.folder(project)
        document = factory.document(project)

        into = client.put(
            f"/api/documents/{document.id}/move", json={"folderId": folder.id}, headers=auth_headers(owner)
        )
        back = client.put(f"/api/documents/{document.id}/move", json={"folderId": None}, headers=auth_headers(owner))

        assert into.json()["folderId"] == folder.id
        assert back.json()["folderId"] is None

    def test_viewer_cannot_delete(self, client, db_session, factory, project, viewer, auth_headers):
        document = factory.document(project)

        response = client.delete(f"/api/documents/{document.id}", headers=auth_headers(viewer))

        assert response.status_code == 403

    def test_editor_deletes_document(self, client, db_session, factory, project, editor, auth_headers):
        document_id = factory.document(project).id

        response = client.delete(f"/api/documents/{document_id}", headers=auth_headers(editor))

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.get(Document, document_id) is None


class TestDocumentContentSave:
    """Saving content follows the edit decision order."""

    def test_owner_saves_content(self, client, db_session, factory, owner, project, auth_headers):
        document = factory.document(project)

        response = client.put(
            f"/api/documents/{document.id}/content", json={"content": "const x = 1;"}, headers=auth_headers(owner)
        )

        assert response.status_code == 200
        assert response.json()["content"] == "const x = 1;"

    def test_editor_without_grant_gets_read_only_denial(self, client, db_session, factory, project, editor,
                                                        auth_headers):
        # Arrange
        document = factory.document(project, content="original")

        # Act
        response = client.put(
            f"/api/documents/{document.id}/content", json={"content": "changed"}, headers=auth_headers(editor)
        )

        # Assert
        assert response.status_code == 403
        body = response.json()
        assert body["error"] == "You do not have permission to edit this document"
        assert body["reason"] == "Root file requires explicit permission"
        assert body["canView"] is True
        assert body["canEdit"] is False
        db_session.expire_all()
        assert db_session.get(Document, document.id).content == "original"

    def test_folder_document_without_folder_grant(self, client, db_session, factory, project, editor, auth_headers):
        folder = factory.folder(project)
        document = factory.document(project, folder=folder)

        response = client.put(
            f"/api/documents/{document.id}/content", json={"content": "x"}, headers=auth_headers(editor)
        )

        assert response.status_code == 403
        assert response.json()["reason"] == "No folder access granted"

    def test_folder_grant_allows_save(self, client, db_session, factory, project, editor, auth_headers):
        folder = factory.folder(project)
        document = factory.document(project, folder=folder)
        factory.folder_grant(folder, editor, can_edit=True)

        response = client.put(
            f"/api/documents/{document.id}/content", json={"content": "granted"}, headers=auth_headers(editor)
        )

        assert response.status_code == 200

    def test_document_grant_allows_viewer_to_save(self, client, db_session, factory, project, viewer, auth_headers):
        document = factory.document(project)
        factory.document_grant(document, viewer, can_edit=True)

        response = client.put(
            f"/api/documents/{document.id}/content", json={"content": "granted"}, headers=auth_headers(viewer)
        )

        assert response.status_code == 200

    def test_admin_member_saves_anything(self, client, db_session, factory, project, auth_headers):
        admin = factory.user()
        factory.member(project, admin, ProjectRole.ADMIN)
        folder = factory.folder(project)
        document = factory.document(project, folder=folder)

        response = client.put(
            f"/api/documents/{document.id}/content", json={"content": "admin"}, headers=auth_headers(admin)
        )

        assert response.status_code == 200

    def test_outsider_gets_plain_denial(self, client, db_session, factory, project, auth_headers):
        document = factory.document(project)

        response = client.put(
            f"/api/documents/{document.id}/content", json={"content": "x"}, headers=auth_headers(factory.user())
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Access denied"
        assert "canView" not in response.json()


class TestFolderEndpoints:
    """Test suite for /api/folders."""

    def test_create_nested_folders(self, client, db_session, owner, project, auth_headers):
        parent = client.post(
            "/api/folders", json={"projectId": project.id, "name": "src"}, headers=auth_headers(owner)
        ).json()

        response = client.post(
            "/api/folders",
            json={"projectId": project.id, "name": "lib", "parentId": parent["id"]},
            headers=auth_headers(owner),
        )

        assert response.status_code == 201
        assert response.json()["parentId"] == parent["id"]

    def test_list_folders_with_children_and_documents(self, client, db_session, factory, project, editor,
                                                      auth_headers):
        src = factory.folder(project, name="src")
        factory.folder(project, name="lib", parent=src)
        factory.document(project, name="a.js", folder=src)

        response = client.get(f"/api/folders/project/{project.id}", headers=auth_headers(editor))

        assert response.status_code == 200
        folders = response.json()
        assert [folder["name"] for folder in folders] == ["lib", "src"]
        src_entry = folders[1]
        assert [child["name"] for child in src_entry["children"]] == ["lib"]
        assert [document["name"] for document in src_entry["documents"]] == ["a.js"]

    def test_parent_from_other_project_is_rejected(self, client, db_session, factory, owner, project, auth_headers):
        foreign = factory.folder(factory.project(owner, name="Other"))

        response = client.post(
            "/api/folders",
            json={"projectId": project.id, "name": "x", "parentId": foreign.id},
            headers=auth_headers(owner),
        )

        assert response.status_code == 400

    def test_viewer_cannot_create_folder(self, client, db_session, project, viewer, auth_headers):
        response = client.post("/api/folders", json={"projectId": project.id, "name": "x"}, headers=auth_headers(viewer))

        assert response.status_code == 403

    def test_rename_folder(self, client, db_session, factory, project, editor, auth_headers):
        folder = factory.folder(project)

        response = client.put(f"/api/folders/{folder.id}", json={"name": "source"}, headers=auth_headers(editor))

        assert response.status_code == 200
        assert response.json()["name"] == "source"

    def test_delete_folder_removes_contents(self, client, db_session, factory, owner, project, auth_headers):
        # Arrange
        src = factory.folder(project, name="src")
        lib = factory.folder(project, name="lib", parent=src)
        factory.document(project, folder=src)
        factory.document(project, folder=lib)
        root_document = factory.document(project, name="README.md")

        # Act
        response = client.delete(f"/api/folders/{src.id}", headers=auth_headers(owner))

        # Assert
        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.query(Folder).count() == 0
        assert [document.id for document in db_session.query(Document).all()] == [root_document.id]
