"""Grid view animating the agent's position."""

from typing import Dict, List, Optional, Tuple

from PySide6.QtWidgets import QGraphicsView, QGraphicsScene
from PySide6.QtGui import QPainter
from PySide6.QtCore import Qt

from ..app.controller import GridQController
from ..domain.types import State
from .tiles import GridTile


class GridView(QGraphicsView):
    """Graphics view painting the grid, the goal and the agent."""

    def __init__(self, controller: GridQController):
        super().__init__()

        self.controller = controller
        self.scene = QGraphicsScene()
        self.setScene(self.scene)

        self.tiles: Dict[Tuple[int, int], GridTile] = {}
        self.tile_size = 30.0
        self.show_q_values = False
        self._agent_state: Optional[State] = None
        self._path: List[State] = []

        self.setRenderHint(QPainter.Antialiasing)

        self.controller.grid_updated.connect(self.update_grid)
        self.controller.state_updated.connect(self.update_state)
        self.controller.episode_completed.connect(self._on_episode_completed)
        self.controller.path_found.connect(self.show_path)

        self.update_grid()

    def update_grid(self):
        """Rebuild all tiles from the controller's environment."""
        env = self.controller.environment

        self.scene.clear()
        self.tiles.clear()
        self._agent_state = None
        self._path = []

        size = env.grid_size
        self.scene.setSceneRect(0, 0, size * self.tile_size, size * self.tile_size)

        for y in range(size):
            for x in range(size):
                tile = GridTile(x, y, self.tile_size)
                tile.set_show_q_values(self.show_q_values)
                self.scene.addItem(tile)
                self.tiles[(x, y)] = tile

        self._refresh_kinds()
        self.refresh_q_values()

    def _refresh_kinds(self):
        env = self.controller.environment
        path_cells = {s.as_tuple() for s in self._path}
        for coord, tile in self.tiles.items():
            if self._agent_state is not None and coord == self._agent_state.as_tuple():
                tile.set_kind("agent")
            elif coord == env.goal.as_tuple():
                tile.set_kind("goal")
            elif coord in path_cells:
                tile.set_kind("path")
            elif coord == env.start.as_tuple():
                tile.set_kind("start")
            else:
                tile.set_kind("empty")

    def update_state(self, state: State):
        """Move the agent marker to ``state``."""
        previous = self._agent_state
        self._agent_state = state
        if self._path:
            self._path = []
            self._refresh_kinds()
            return

        env = self.controller.environment
        if previous is not None and previous.as_tuple() in self.tiles:
            if previous == env.goal:
                kind = "goal"
            elif previous == env.start:
                kind = "start"
            else:
                kind = "empty"
            self.tiles[previous.as_tuple()].set_kind(kind)
        if state.as_tuple() in self.tiles:
            self.tiles[state.as_tuple()].set_kind("agent")

    def show_path(self, path: List[State]):
        """Highlight a greedy path."""
        self._agent_state = None
        self._path = list(path)
        self._refresh_kinds()

    def refresh_q_values(self):
        if not self.show_q_values:
            return
        table = self.controller.q_table_snapshot()
        if table is None:
            return
        env = self.controller.environment
        for (x, y), tile in self.tiles.items():
            tile.set_q_values(table[env.state_index(State(x, y))])

    def _on_episode_completed(self, episode_index: int, steps: int, total_reward: float):
        self.refresh_q_values()

    def set_show_q_values(self, show: bool):
        """Enable or disable best-action arrows on all tiles."""
        self.show_q_values = show
        for tile in self.tiles.values():
            tile.set_show_q_values(show)
        self.refresh_q_values()

    def wheelEvent(self, event):
        """Handle mouse wheel for zooming."""
        zoom_factor = 1.15
        if event.angleDelta().y() > 0:
            self.scale(zoom_factor, zoom_factor)
        else:
            self.scale(1 / zoom_factor, 1 / zoom_factor)

    def fit_in_view(self):
        """Fit the entire grid in the view."""
        if self.scene.items():
            self.fitInView(self.scene.itemsBoundingRect(), Qt.KeepAspectRatio)
