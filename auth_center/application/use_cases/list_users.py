from __future__ import annotations

from auth_center.application.dto.auth import ListUsersInput, ListUsersOutput, UserStatistics
from auth_center.application.ports.auth_port import AuthPort


DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class ListUsersUseCase:
    def __init__(self, *, auth_port: AuthPort):
        self._auth_port = auth_port

    def execute(self, command: ListUsersInput) -> ListUsersOutput:
        page = command.page if command.page is not None and command.page >= 1 else 1
        page_size = command.page_size
        if page_size is None or page_size < 1 or page_size > MAX_PAGE_SIZE:
            page_size = DEFAULT_PAGE_SIZE

        total = self._auth_port.count_users()
        users = self._auth_port.list_users(limit=page_size, offset=(page - 1) * page_size)
        return ListUsersOutput(
            users=users,
            total=total,
            page=page,
            page_size=page_size,
            statistics=UserStatistics(
                total=total,
                with_password=self._auth_port.count_users_with_password(),
            ),
        )
