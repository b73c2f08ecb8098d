"""Browser session state.

The session holds the one active DataWindow and is passed explicitly to the
code that needs it. The tree and type selection stay free of session state.

Navigation archives the active window into the dataset it came from and
seeds a new one from the target's archived window. Column type edits live in
a ColumnTypeEditor until applied, so tree refreshes never overwrite them.
"""

from __future__ import annotations

from collections.abc import Sequence

from dsbrowse.client.remote import RemoteClient
from dsbrowse.core.config import Settings, get_settings
from dsbrowse.core.logging import get_logger
from dsbrowse.core.models.base import Result, TypeTag
from dsbrowse.tree.models import PAGE_SIZES, ColumnPreference, DataWindow, Node, OverriddenType
from dsbrowse.tree.synchronizer import TreeSynchronizer, parent_path
from dsbrowse.typing.selection import TypeSelection, select_column_type, toggle_override

logger = get_logger(__name__)


def parse_value_list(text: str) -> list[str]:
    """Parse a comma-separated value list as typed into a list editor."""
    if not text.strip():
        return []
    return [value.strip() for value in text.split(",")]


class BrowserSession:
    """Active DataWindow plus cursor navigation over a TreeSynchronizer."""

    def __init__(self, synchronizer: TreeSynchronizer, settings: Settings | None = None):
        settings = settings or get_settings()
        self.synchronizer = synchronizer
        self.window = DataWindow(page_size=settings.default_page_size)

    def cursor(self) -> Node | None:
        """The node the active window points at, if any."""
        if not self.window.path:
            return None
        return self.synchronizer.find_node(self.window.path)

    def navigate(self, path: str) -> DataWindow:
        """Make ``path`` the active node, archiving the current window."""
        if path == self.window.path:
            return self.window

        old = self.cursor()
        if old is not None and old.is_dataset:
            old.data_window = self.window.model_copy(deep=True)

        target = self.synchronizer.find_node(path)
        archived = target.data_window if target is not None else None
        if archived is not None:
            self.window = archived.model_copy(deep=True).with_changes(path=target.path)
        else:
            self.window = DataWindow(
                path=target.path if target is not None else None,
                page_size=self.window.page_size,
                tolerance=self.window.tolerance,
            )
        logger.debug("session_navigated", path=self.window.path)
        return self.window

    def navigate_to_parent(self) -> DataWindow:
        return self.navigate(parent_path(self.window.path or ""))

    def upload_folder(self) -> str:
        """Folder new uploads go to: the cursor if it is a folder, else its parent."""
        node = self.cursor()
        if node is None:
            return ""
        return node.path if node.is_folder else parent_path(node.path)

    # --- Grid paging ---

    def set_page(self, page_number: int) -> DataWindow:
        self.window = self.window.with_changes(page_number=max(1, page_number))
        return self.window

    def next_page(self) -> DataWindow:
        return self.set_page(self.window.page_number + 1)

    def previous_page(self) -> DataWindow:
        return self.set_page(self.window.page_number - 1)

    def set_page_size(self, page_size: int) -> DataWindow:
        if page_size not in PAGE_SIZES:
            raise ValueError(f"page_size must be one of {PAGE_SIZES}, got {page_size}")
        self.window = self.window.with_changes(page_size=page_size)
        return self.window

    def set_filter(self, filter_expr: str) -> DataWindow:
        self.window = self.window.with_changes(filter=filter_expr, page_number=1)
        return self.window

    # --- Types ---

    def column_type(self, name: str) -> TypeSelection:
        """Effective type of a column under the active window's settings."""
        node = self.cursor()
        column = self.window.preference(name) or ColumnPreference.automatic(name)
        return select_column_type(column, node.schema_data if node else None, self.window.tolerance)

    def column_editor(self) -> ColumnTypeEditor:
        return ColumnTypeEditor(self)


class ColumnTypeEditor:
    """Pending edits to the active window's column types and tolerance."""

    def __init__(self, session: BrowserSession):
        self.session = session
        self.edited_types: list[ColumnPreference] = list(session.window.preferred_types)
        self.tolerance: float = session.window.tolerance

    @property
    def has_changes(self) -> bool:
        window = self.session.window
        return self.edited_types != window.preferred_types or self.tolerance != window.tolerance

    def effective_type(self, name: str) -> TypeSelection:
        """Type shown for a column, using the pending tolerance."""
        node = self.session.cursor()
        return select_column_type(
            self._column(name), node.schema_data if node else None, self.tolerance
        )

    def set_tolerance(self, tolerance: float) -> None:
        if tolerance < 0:
            raise ValueError("tolerance must be non-negative")
        self.tolerance = tolerance

    def toggle_override(self, name: str) -> ColumnPreference:
        column = self._column(name)
        node = self.session.cursor()
        schema = node.schema_data if node else None
        updated = toggle_override(
            column,
            schema.exception_counts(name) if schema else {},
            self.tolerance,
            schema.categories(name) if schema else (),
        )
        return self._replace(updated)

    def set_type(self, name: str, tag: TypeTag | str) -> ColumnPreference:
        """Pin a column to ``tag``, keeping category values already entered."""
        column = self._column(name)
        values = column.choice.category_values if isinstance(column.choice, OverriddenType) else ()
        return self._replace(ColumnPreference.overridden(name, tag, values))

    def set_category_values(self, name: str, values: Sequence[str]) -> ColumnPreference:
        column = self._column(name)
        if not isinstance(column.choice, OverriddenType):
            raise ValueError(f"Column '{name}' has no type override to attach values to")
        return self._replace(ColumnPreference.overridden(name, column.choice.tag, tuple(values)))

    async def apply(self, client: RemoteClient) -> Result[DataWindow]:
        """Save the edits remotely and make them the active window's settings."""
        path = self.session.window.path
        if not path:
            return Result.fail("No dataset selected")

        result = await client.post_preferred_types(path, self.edited_types, self.tolerance)
        if not result.success:
            return Result.fail(result.error or "Saving preferred types failed")

        self.session.window = self.session.window.with_changes(
            preferred_types=list(self.edited_types), tolerance=self.tolerance
        )
        logger.info("preferred_types_saved", path=path, columns=len(self.edited_types))
        return Result.ok(self.session.window)

    def _column(self, name: str) -> ColumnPreference:
        for column in self.edited_types:
            if column.name == name:
                return column
        raise KeyError(name)

    def _replace(self, updated: ColumnPreference) -> ColumnPreference:
        self.edited_types = [updated if c.name == updated.name else c for c in self.edited_types]
        return updated
