# tests/test_user_service.py
import pytest

from userhub.core.errors import DuplicateUserEmailError, EmptyFieldsError, NotFoundError
from userhub.core.schemas import ListFilter, RegisterInput, UpdateUserInput
from userhub.services.user_store import MemoryUserStore
from userhub.services.users import UserService


class CountingStore(MemoryUserStore):
    def __init__(self):
        super().__init__()
        self.calls = []
        self.last_filter = None

    def create(self, draft):
        self.calls.append("create")
        return super().create(draft)

    def get_by_id(self, user_id):
        self.calls.append("get_by_id")
        return super().get_by_id(user_id)

    def update(self, user):
        self.calls.append("update")
        return super().update(user)

    def list(self, opts):
        self.calls.append("list")
        self.last_filter = opts
        return super().list(opts)


@pytest.fixture()
def counting_store() -> CountingStore:
    return CountingStore()


@pytest.fixture()
def svc(counting_store, hasher) -> UserService:
    return UserService(counting_store, hasher)


def _register(svc, name="testname", email="a@b.com", password="secret1"):
    return svc.register(RegisterInput(name=name, email=email, password=password, password2=password))


def test_register_hashes_password(svc, hasher):
    user = _register(svc)
    assert user.email == "a@b.com"
    assert user.password != "secret1"
    assert hasher.verify("secret1", user.password)


def test_register_duplicate_email_performs_no_insert(svc, counting_store):
    _register(svc)
    counting_store.calls.clear()
    with pytest.raises(DuplicateUserEmailError):
        _register(svc, name="another")
    assert "create" not in counting_store.calls


def test_update_with_no_fields_fails_before_store_call(svc, counting_store):
    user = _register(svc)
    counting_store.calls.clear()
    with pytest.raises(EmptyFieldsError):
        svc.update(user.id, UpdateUserInput())
    assert counting_store.calls == []


def test_update_name_only_keeps_other_fields_identical(svc):
    before = _register(svc)
    after = svc.update(before.id, UpdateUserInput(name="newname"))
    assert after.name == "newname"
    assert after.email == before.email
    assert after.password == before.password
    assert after.created_at == before.created_at


def test_update_password_rehashes(svc, hasher):
    user = _register(svc)
    after = svc.update(user.id, UpdateUserInput(password="secret2", password2="secret2"))
    assert hasher.verify("secret2", after.password)
    assert not hasher.verify("secret1", after.password)
    assert after.name == user.name


def test_update_email_to_taken_one_is_rejected(svc):
    _register(svc)
    bob = _register(svc, name="bobby", email="bob@mail.com")
    with pytest.raises(DuplicateUserEmailError):
        svc.update(bob.id, UpdateUserInput(email="a@b.com"))


def test_update_keeping_own_email_is_allowed(svc):
    user = _register(svc)
    after = svc.update(user.id, UpdateUserInput(email="a@b.com", name="renamed"))
    assert (after.email, after.name) == ("a@b.com", "renamed")


def test_get_and_delete_propagate_not_found(svc):
    with pytest.raises(NotFoundError):
        svc.get("missing")
    with pytest.raises(NotFoundError):
        svc.delete("missing")
    with pytest.raises(NotFoundError):
        svc.update("missing", UpdateUserInput(name="newname"))


def test_delete_returns_user_and_removes_it(svc):
    user = _register(svc)
    assert svc.delete(user.id).id == user.id
    with pytest.raises(NotFoundError):
        svc.get(user.id)


@pytest.mark.parametrize("limit, offset, expected", [
    (None, None, (20, 0)),
    (500, 3, (100, 3)),
    (10, None, (10, 0)),
])
def test_list_normalizes_pagination(svc, counting_store, limit, offset, expected):
    svc.list(ListFilter(limit=limit, offset=offset))
    f = counting_store.last_filter
    assert (f.limit, f.offset) == expected
