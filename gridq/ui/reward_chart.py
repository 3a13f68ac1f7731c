"""Line chart of total reward per episode."""

from PySide6.QtCharts import QChart, QChartView, QLineSeries, QValueAxis
from PySide6.QtGui import QPainter
from PySide6.QtCore import Qt


class RewardChart(QChartView):
    """Plots (episode, total reward) points as episodes complete."""

    def __init__(self, parent=None):
        super().__init__(parent)

        self._series = QLineSeries()
        self._series.setName("Reward")

        chart = QChart()
        chart.setTitle("Q-Learning Performance Over Time")
        chart.addSeries(self._series)
        chart.legend().hide()

        self._x_axis = QValueAxis()
        self._x_axis.setTitleText("Episode")
        self._x_axis.setLabelFormat("%d")
        self._y_axis = QValueAxis()
        self._y_axis.setTitleText("Total Reward")

        chart.addAxis(self._x_axis, Qt.AlignBottom)
        chart.addAxis(self._y_axis, Qt.AlignLeft)
        self._series.attachAxis(self._x_axis)
        self._series.attachAxis(self._y_axis)

        self.setChart(chart)
        self.setRenderHint(QPainter.Antialiasing)
        self.setMinimumHeight(220)

        self._min_reward = 0.0
        self._max_reward = 0.0
        self.clear()

    def clear(self):
        self._series.clear()
        self._min_reward = 0.0
        self._max_reward = 0.0
        self._x_axis.setRange(0, 10)
        self._y_axis.setRange(-1, 1)

    def add_episode(self, episode_index: int, steps: int, total_reward: float):
        """Append one point; axes grow to fit."""
        self._series.append(episode_index, total_reward)

        self._min_reward = min(self._min_reward, total_reward)
        self._max_reward = max(self._max_reward, total_reward)
        margin = max((self._max_reward - self._min_reward) * 0.05, 0.5)

        self._x_axis.setRange(0, max(10, episode_index + 1))
        self._y_axis.setRange(self._min_reward - margin, self._max_reward + margin)
