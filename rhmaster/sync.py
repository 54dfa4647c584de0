from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Generic, Iterator, List, Optional, Set, Tuple, TypeVar
from uuid import uuid4

from .codec import employee_from_storage, employee_to_storage, record_from_storage, record_to_storage
from .config import Settings
from .errors import ConflictError, ConnectivityError, DataIntegrityError
from .logging import get_logger
from .models import ConnectivityMode, EntityKind, Employee, OrphanRecordPolicy, PayrollRecord
from .remote import RemoteStore
from .storage import SEED_EMPLOYEE_ID, LocalStore, Snapshot
from .validation import digits_only, validate_employee

logger = get_logger(__name__)

T = TypeVar("T")


class VersionedCollection(Generic[T]):
    """An owned list of records with a counter bumped on every mutation."""

    def __init__(self, items: Optional[List[T]] = None) -> None:
        self._items: List[T] = list(items or [])
        self.version = 0

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def items(self) -> List[T]:
        return list(self._items)

    def find(self, item_id: str) -> Optional[T]:
        for item in self._items:
            if getattr(item, "id") == item_id:
                return item
        return None

    def replace_all(self, items: List[T]) -> None:
        self._items = list(items)
        self.version += 1

    def append(self, item: T) -> None:
        self._items.append(item)
        self.version += 1

    def prepend(self, items: List[T]) -> None:
        self._items = list(items) + self._items
        self.version += 1

    def replace_item(self, item: T) -> None:
        item_id = getattr(item, "id")
        for index, existing in enumerate(self._items):
            if getattr(existing, "id") == item_id:
                self._items[index] = item
                self.version += 1
                return
        raise KeyError(item_id)

    def remove(self, item_id: str) -> None:
        for index, existing in enumerate(self._items):
            if getattr(existing, "id") == item_id:
                del self._items[index]
                self.version += 1
                return
        raise KeyError(item_id)


@dataclass
class SessionContext:
    mode: ConnectivityMode = ConnectivityMode.OFFLINE
    employees: VersionedCollection[Employee] = field(default_factory=VersionedCollection)
    payroll_records: VersionedCollection[PayrollRecord] = field(default_factory=VersionedCollection)
    # employees edited locally whose remote update has not landed yet
    unsynced_updates: Set[str] = field(default_factory=set)


def new_id() -> str:
    return str(uuid4())


class SynchronizedStore:
    """Owns the employee and payroll collections for one session.

    Every write lands in the local mirror first and is then attempted
    against the remote mirror while ONLINE. A connectivity failure moves
    the session to OFFLINE without raising; the local write stands. A
    duplicate key rejected by the remote undoes the local write and is
    raised as ConflictError.

    Entities written while OFFLINE are replayed to the remote when the
    session comes back ONLINE, so a refresh from the remote never drops
    them.
    """

    def __init__(
        self,
        context: SessionContext,
        local: LocalStore,
        remote: Optional[RemoteStore] = None,
        orphan_policy: OrphanRecordPolicy = OrphanRecordPolicy.TOLERATE,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.context = context
        self.local = local
        self.remote = remote
        self.orphan_policy = OrphanRecordPolicy(orphan_policy)
        self.id_factory = id_factory

    @property
    def mode(self) -> ConnectivityMode:
        return self.context.mode

    @property
    def online(self) -> bool:
        return self.context.mode is ConnectivityMode.ONLINE

    # -- loading -----------------------------------------------------------

    def load(self) -> ConnectivityMode:
        """Initial load: ping the remote once, otherwise fall back to local."""

        if self.remote is None:
            logger.info("remote_not_configured")
            self._load_local()
            return self.context.mode
        snapshot = self.local.load()
        if snapshot is not None:
            self._apply_snapshot(snapshot)
        try:
            self.remote.ping()
            self._fetch_remote()
        except ConnectivityError as exc:
            self._go_offline("initial_load", exc)
            self._load_local()
        return self.context.mode

    def reconnect(self) -> ConnectivityMode:
        if self.remote is None:
            return self.context.mode
        try:
            self.remote.ping()
            self._fetch_remote()
        except ConnectivityError as exc:
            self._go_offline("reconnect", exc)
        return self.context.mode

    def _fetch_remote(self) -> None:
        employees = self._pull_employees(replay=True)
        records = self._pull_records(replay=True)
        self.context.employees.replace_all(employees)
        self.context.payroll_records.replace_all(records)
        self._persist_local()
        self._set_mode(ConnectivityMode.ONLINE)
        logger.info("remote_loaded", employees=len(employees), payroll_records=len(records))

    def _pull_employees(self, replay: bool) -> List[Employee]:
        """Remote roster merged with the employees only the local mirror knows."""

        fetched = [employee_from_storage(row) for row in self.remote.fetch_employees()]
        known = {e.id for e in fetched}
        local_only = [e for e in self.context.employees if e.id not in known and e.id != SEED_EMPLOYEE_ID]
        edited = {e.id: e for e in self.context.employees if e.id in known and e.id in self.context.unsynced_updates}
        if replay:
            local_only = [e for e in local_only if self._replay("insert_employee", e.id, employee_to_storage(e))]
            for employee_id, employee in list(edited.items()):
                if not self._replay("update_employee", employee_id, employee_to_storage(employee)):
                    del edited[employee_id]
            self.context.unsynced_updates.clear()
        return [edited.get(e.id, e) for e in fetched] + local_only

    def _pull_records(self, replay: bool) -> List[PayrollRecord]:
        fetched = [record_from_storage(row) for row in self.remote.fetch_records()]
        known = {r.id for r in fetched}
        local_only = [r for r in self.context.payroll_records if r.id not in known]
        if replay and local_only:
            rows = [record_to_storage(r) for r in local_only]
            if not self._replay("insert_records", ",".join(r.id for r in local_only), rows):
                local_only = []
        return local_only + fetched

    def _replay(self, operation: str, entity_id: str, payload) -> bool:
        """Push a local-only write to the remote; False when it was rejected."""

        try:
            getattr(self.remote, operation)(payload)
        except ConflictError as exc:
            logger.warning("replay_rejected", operation=operation, entity_id=entity_id, error=exc.message)
            return False
        logger.info("replayed", operation=operation, entity_id=entity_id)
        return True

    def _apply_snapshot(self, snapshot: Snapshot) -> None:
        self.context.employees.replace_all(snapshot.employees)
        self.context.payroll_records.replace_all(snapshot.payroll_records)
        self.context.unsynced_updates = set(snapshot.unsynced_updates)

    def _load_local(self) -> None:
        seeded = not self.local.exists()
        snapshot = self.local.load_or_seed()
        self._apply_snapshot(snapshot)
        self._set_mode(ConnectivityMode.OFFLINE)
        logger.info(
            "local_loaded",
            employees=len(snapshot.employees),
            payroll_records=len(snapshot.payroll_records),
            seeded=seeded,
        )

    def _set_mode(self, mode: ConnectivityMode) -> None:
        if self.context.mode is not mode:
            logger.info("mode_changed", previous=self.context.mode.value, current=mode.value)
        self.context.mode = mode

    def _go_offline(self, operation: str, error: Exception) -> None:
        logger.warning("remote_unavailable", operation=operation, error=str(error))
        self._set_mode(ConnectivityMode.OFFLINE)

    def _persist_local(self) -> None:
        self.local.save(
            self.context.employees.items(),
            self.context.payroll_records.items(),
            self.context.unsynced_updates,
        )

    def _remote_write(self, operation: str, write: Callable[[], None]) -> bool:
        """Run a remote write while ONLINE; True once the remote has it."""

        if not self.online or self.remote is None:
            return False
        try:
            write()
        except ConnectivityError as exc:
            self._go_offline(operation, exc)
            return False
        return True

    # -- reads -------------------------------------------------------------

    def read_all(self, kind: EntityKind) -> list:
        kind = EntityKind(kind)
        if self.online and self.remote is not None:
            try:
                if kind is EntityKind.EMPLOYEES:
                    self.context.employees.replace_all(self._pull_employees(replay=False))
                else:
                    self.context.payroll_records.replace_all(self._pull_records(replay=False))
                self._persist_local()
            except ConnectivityError as exc:
                self._go_offline(f"read_{kind.value}", exc)
        if kind is EntityKind.EMPLOYEES:
            return self.context.employees.items()
        return self.context.payroll_records.items()

    def find_employee(self, employee_id: str) -> Optional[Employee]:
        return self.context.employees.find(employee_id)

    def employee_for_record(self, record: PayrollRecord) -> Optional[Employee]:
        employee = self.find_employee(record.employee_id)
        if employee is None and self.orphan_policy is OrphanRecordPolicy.REJECT:
            raise DataIntegrityError(
                f"Payroll record {record.id} references unknown employee {record.employee_id}"
            )
        return employee

    def history(self) -> List[Tuple[PayrollRecord, Optional[Employee]]]:
        """Payroll records, newest first, paired with their employee."""

        return [(record, self.employee_for_record(record)) for record in self.context.payroll_records]

    # -- writes ------------------------------------------------------------

    def _check_unique_cpf(self, employee: Employee) -> None:
        raw = digits_only(employee.cpf)
        if not raw:
            return
        for existing in self.context.employees:
            if existing.id != employee.id and digits_only(existing.cpf) == raw:
                raise ConflictError("An employee with this CPF is already registered.")

    def create_employee(self, employee: Employee) -> Employee:
        validate_employee(employee)
        created = replace(employee, id=self.id_factory())
        self._check_unique_cpf(created)
        self.context.employees.append(created)
        self._persist_local()
        logger.info("employee_created", employee_id=created.id, mode=self.mode.value)
        try:
            self._remote_write("insert_employee", lambda: self.remote.insert_employee(employee_to_storage(created)))
        except ConflictError:
            self.context.employees.remove(created.id)
            self._persist_local()
            logger.warning("employee_rejected", employee_id=created.id)
            raise
        return created

    def update_employee(self, employee: Employee) -> Employee:
        validate_employee(employee)
        previous = self.context.employees.find(employee.id)
        if previous is None:
            raise KeyError(employee.id)
        self._check_unique_cpf(employee)
        self.context.employees.replace_item(employee)
        self.context.unsynced_updates.add(employee.id)
        self._persist_local()
        logger.info("employee_updated", employee_id=employee.id, mode=self.mode.value)
        try:
            written = self._remote_write(
                "update_employee", lambda: self.remote.update_employee(employee_to_storage(employee))
            )
        except ConflictError:
            self.context.employees.replace_item(previous)
            self.context.unsynced_updates.discard(employee.id)
            self._persist_local()
            logger.warning("employee_update_rejected", employee_id=employee.id)
            raise
        if written:
            self.context.unsynced_updates.discard(employee.id)
            self._persist_local()
        return employee

    def create_record(self, record: PayrollRecord) -> PayrollRecord:
        return self.create_records([record])[0]

    def create_records(self, records: List[PayrollRecord]) -> List[PayrollRecord]:
        """Insert a batch of records locally and as one remote call."""

        created = [replace(record, id=self.id_factory()) for record in records]
        if not created:
            return []
        self.context.payroll_records.prepend(created)
        self._persist_local()
        logger.info("payroll_records_created", count=len(created), mode=self.mode.value)
        try:
            self._remote_write(
                "insert_records",
                lambda: self.remote.insert_records([record_to_storage(r) for r in created]),
            )
        except ConflictError:
            for record in created:
                self.context.payroll_records.remove(record.id)
            self._persist_local()
            logger.warning("payroll_records_rejected", count=len(created))
            raise
        return created


def open_store(settings: Settings) -> SynchronizedStore:
    remote = None
    if settings.database_url:
        remote = RemoteStore.from_url(settings.database_url)
        if settings.create_schema:
            try:
                remote.create_schema()
            except ConnectivityError as exc:
                logger.warning("remote_schema_failed", error=str(exc))
    return SynchronizedStore(
        SessionContext(),
        LocalStore(settings.local_store_path),
        remote=remote,
        orphan_policy=settings.orphan_policy,
    )
