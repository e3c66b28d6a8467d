import pytest

from wikidelete.core.domain import (
    Actor,
    FileRef,
    PermissionViolation,
    Status,
    StatusMessage,
    WatchDirective,
    make_target,
    resolve_watch_directive,
)
from wikidelete.core.errors import DeletionError
from wikidelete.core.services import build_handler
from wikidelete.core.titles import parse_title
from wikidelete.models import DeleteRequest

ALICE = Actor("Alice", groups=frozenset({"sysop"}))


class FakeAuthorizer:
    def __init__(self, errors=None):
        self.errors = errors or []
        self.calls = []

    def user_permission_errors(self, action, target, actor, token):
        self.calls.append((action, target.title.prefixed_text, actor.name, token))
        return list(self.errors)


class FakeBackend:
    """Records every collaborator call made by the handler."""

    def __init__(self, pages=(), reason=None, file=None, archived=None, page_status=None, file_status=None):
        self.pages = {parse_title(t).db_key: i for i, t in enumerate(pages, start=1)}
        self.reason = reason
        self.file = file
        self.archived = archived or {}
        self.page_status = page_status or Status.good(101)
        self.file_status = file_status or Status.good(202)
        self.calls = []
        self.watch_error = None

    def resolve_target(self, title=None, pageid=None):
        self.calls.append(("resolve_target", title, pageid))
        if pageid is not None:
            for key, pid in self.pages.items():
                if pid == pageid:
                    return make_target(pid, parse_title(key))
            return None
        pid = self.pages.get(title.db_key)
        return make_target(pid, title, exists=pid is not None)

    def synthesize_reason(self, target):
        self.calls.append(("synthesize_reason",))
        return self.reason

    def current_file(self, target):
        self.calls.append(("current_file",))
        return self.file

    def archived_file(self, target, archive_name):
        self.calls.append(("archived_file", archive_name))
        return self.archived.get(archive_name)

    def delete_page(self, target, reason, actor, suppress=False, log_action=True):
        self.calls.append(("delete_page", reason, suppress, log_action))
        return self.page_status

    def delete_file(self, target, file, archive_name, reason, suppress, actor):
        self.calls.append(("delete_file", file.name, archive_name, reason, suppress))
        return self.file_status

    def set_watch(self, directive, target, actor, context):
        self.calls.append(("set_watch", directive, context))
        if self.watch_error:
            raise self.watch_error

    def names(self):
        return [c[0] for c in self.calls]


def _handler(backend, authorizer=None):
    return build_handler(backend, authorizer or FakeAuthorizer())


def _req(**kwargs):
    kwargs.setdefault("token", "tok")
    return DeleteRequest(**kwargs)


def test_plain_page_with_synthesized_reason():
    backend = FakeBackend(pages=["Sandbox"], reason="blanked the page")
    result = _handler(backend).handle(_req(title="Sandbox"), ALICE)
    assert result.title == "Sandbox"
    assert result.reason == "blanked the page"
    assert result.logid == 101
    assert result.warnings is None
    assert ("delete_page", "blanked the page", False, True) in backend.calls


def test_missing_target_touches_nothing_but_resolution():
    backend = FakeBackend(pages=[])
    authorizer = FakeAuthorizer()
    with pytest.raises(DeletionError) as exc:
        _handler(backend, authorizer).handle(_req(title="Nowhere"), ALICE)
    assert exc.value.code == "notanarticle"
    assert exc.value.status_code == 404
    assert backend.names() == ["resolve_target"]
    assert authorizer.calls == []


def test_unknown_pageid_is_notanarticle():
    with pytest.raises(DeletionError) as exc:
        _handler(FakeBackend(pages=["Sandbox"])).handle(_req(pageid=99), ALICE)
    assert exc.value.code == "notanarticle"


def test_pageid_resolution():
    result = _handler(FakeBackend(pages=["Sandbox"])).handle(_req(pageid=1, reason="r"), ALICE)
    assert result.title == "Sandbox"


def test_title_and_pageid_are_exclusive():
    handler = _handler(FakeBackend(pages=["Sandbox"]))
    with pytest.raises(DeletionError) as exc:
        handler.handle(_req(title="Sandbox", pageid=1), ALICE)
    assert exc.value.code == "invalidparammix"
    with pytest.raises(DeletionError) as exc:
        handler.handle(_req(), ALICE)
    assert exc.value.code == "missingparam"


def test_invalid_title():
    with pytest.raises(DeletionError) as exc:
        _handler(FakeBackend()).handle(_req(title="Bad[title]"), ALICE)
    assert exc.value.code == "invalidtitle"
    assert exc.value.status_code == 400


def test_first_permission_error_is_surfaced():
    authorizer = FakeAuthorizer(
        [PermissionViolation("badtoken"), PermissionViolation("permissiondenied", ("Sandbox",))]
    )
    backend = FakeBackend(pages=["Sandbox"], reason="x")
    with pytest.raises(DeletionError) as exc:
        _handler(backend, authorizer).handle(_req(title="Sandbox"), ALICE)
    assert exc.value.code == "badtoken"
    assert exc.value.status_code == 403
    assert [e["code"] for e in exc.value.details["errors"]] == ["badtoken", "permissiondenied"]
    assert "delete_page" not in backend.names()


def test_page_without_derivable_reason_is_not_deleted():
    backend = FakeBackend(pages=["Sandbox"], reason=None)
    with pytest.raises(DeletionError) as exc:
        _handler(backend).handle(_req(title="Sandbox"), ALICE)
    assert exc.value.code == "cannotdelete"
    assert exc.value.params == ("Sandbox",)
    assert "delete_page" not in backend.names()
    assert "set_watch" not in backend.names()


def test_empty_caller_reason_is_kept():
    backend = FakeBackend(pages=["Sandbox"], reason="auto")
    result = _handler(backend).handle(_req(title="Sandbox", reason=""), ALICE)
    assert result.reason == ""
    assert "synthesize_reason" not in backend.names()


def test_storage_failure_surfaces_messages():
    status = Status(errors=[StatusMessage("cannotdelete", ("Sandbox",))], warnings=[StatusMessage("note")])
    backend = FakeBackend(pages=["Sandbox"], page_status=status)
    with pytest.raises(DeletionError) as exc:
        _handler(backend).handle(_req(title="Sandbox", reason="r"), ALICE)
    assert exc.value.code == "cannotdelete"
    assert exc.value.details["messages"] == [
        {"code": "cannotdelete", "params": ["Sandbox"]},
        {"code": "note", "params": []},
    ]
    assert "set_watch" not in backend.names()


def test_storage_failure_with_unknown_code_maps_to_502():
    backend = FakeBackend(pages=["Sandbox"], page_status=Status.fatal("upstream_error", "boom"))
    with pytest.raises(DeletionError) as exc:
        _handler(backend).handle(_req(title="Sandbox", reason="r"), ALICE)
    assert exc.value.status_code == 502


def test_warning_status_succeeds_with_warnings():
    backend = FakeBackend(
        pages=["Sandbox"], page_status=Status.good(7, warnings=[StatusMessage("edit-conflict", ("Sandbox",))])
    )
    result = _handler(backend).handle(_req(title="Sandbox", reason="r"), ALICE)
    assert result.logid == 7
    assert [w.code for w in result.warnings] == ["edit-conflict"]
    assert "set_watch" in backend.names()


def test_watch_failure_does_not_fail_request():
    backend = FakeBackend(pages=["Sandbox"])
    backend.watch_error = RuntimeError("watchlist down")
    result = _handler(backend).handle(_req(title="Sandbox", reason="r"), ALICE)
    assert result.logid == 101


def test_watch_directive_passed_with_context():
    backend = FakeBackend(pages=["Sandbox"])
    _handler(backend).handle(_req(title="Sandbox", reason="r", watch=True, unwatch=True, watchlist="unwatch"), ALICE)
    assert ("set_watch", WatchDirective.WATCH, "watchdeletion") in backend.calls


def test_watch_directive_precedence():
    assert resolve_watch_directive(True, True, "unwatch") == WatchDirective.WATCH
    assert resolve_watch_directive(False, True, "watch") == WatchDirective.UNWATCH
    assert resolve_watch_directive(False, False, "nochange") == WatchDirective.NOCHANGE
    assert resolve_watch_directive() == WatchDirective.PREFERENCES


# -- file targets --------------------------------------------------------------


def test_archived_file_revision_deletion():
    old = "20200101000000!Example.png"
    backend = FakeBackend(
        pages=["File:Example.png"],
        file=FileRef("Example.png"),
        archived={old: FileRef("Example.png", archive_name=old)},
    )
    result = _handler(backend).handle(_req(title="File:Example.png", oldimage=old), ALICE)
    assert result.title == "File:Example.png"
    assert result.logid == 202
    assert result.reason == ""
    assert ("delete_file", "Example.png", old, "", False) in backend.calls
    assert "synthesize_reason" not in backend.names()


def test_malformed_archive_name_is_rejected_before_lookup():
    authorizer = FakeAuthorizer()
    backend = FakeBackend(pages=["File:Example.png"], file=FileRef("Example.png"))
    with pytest.raises(DeletionError) as exc:
        _handler(backend, authorizer).handle(_req(title="File:Example.png", oldimage="not-a-valid-format"), ALICE)
    assert exc.value.code == "invalidoldimage"
    assert exc.value.status_code == 400
    assert "archived_file" not in backend.names()
    assert "delete_file" not in backend.names()
    assert len(authorizer.calls) == 1


def test_unknown_archive_name_is_nodeleteablefile():
    backend = FakeBackend(pages=["File:Example.png"], file=FileRef("Example.png"))
    with pytest.raises(DeletionError) as exc:
        _handler(backend).handle(_req(title="File:Example.png", oldimage="20200101000000!Example.png"), ALICE)
    assert exc.value.code == "nodeleteablefile"


def test_redirected_archive_is_nodeleteablefile():
    old = "20200101000000!Example.png"
    backend = FakeBackend(
        pages=["File:Example.png"],
        file=FileRef("Example.png"),
        archived={old: FileRef("Example.png", archive_name=old, redirected_to="Other.png")},
    )
    with pytest.raises(DeletionError) as exc:
        _handler(backend).handle(_req(title="File:Example.png", oldimage=old), ALICE)
    assert exc.value.code == "nodeleteablefile"


def test_current_file_keeps_explicit_reason():
    backend = FakeBackend(pages=["File:Example.png"], file=FileRef("Example.png"))
    result = _handler(backend).handle(_req(title="File:Example.png", reason="copyvio"), ALICE)
    assert result.reason == "copyvio"
    assert ("delete_file", "Example.png", None, "copyvio", False) in backend.calls


@pytest.mark.parametrize(
    "file",
    [
        None,
        FileRef("Example.png", exists=False),
        FileRef("Example.png", is_local=False),
        FileRef("Example.png", redirected_to="Other.png"),
    ],
)
def test_non_local_file_falls_back_to_page_deletion(file):
    authorizer = FakeAuthorizer()
    backend = FakeBackend(pages=["File:Example.png"], file=file, reason="auto summary")
    result = _handler(backend, authorizer).handle(
        _req(title="File:Example.png", oldimage="not-a-valid-format"), ALICE
    )
    assert result.reason == "auto summary"
    assert result.logid == 101
    assert "delete_file" not in backend.names()
    # permission is checked again by the page path
    assert len(authorizer.calls) == 2


def test_non_local_file_without_reason_fails_like_a_page():
    backend = FakeBackend(pages=["File:Example.png"], file=FileRef("Example.png", is_local=False), reason=None)
    with pytest.raises(DeletionError) as exc:
        _handler(backend).handle(_req(title="File:Example.png"), ALICE)
    assert exc.value.code == "cannotdelete"
