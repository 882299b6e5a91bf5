"""
HandCloud Core Interfaces.
Defines the abstract contract between the engine and whatever draws the frame.
"""

from abc import ABC, abstractmethod

from handcloud.core.types import FrameOutput


class IRenderer(ABC):
    """
    Abstract Protocol for frame output.
    The engine only hands over buffers and transforms; uploading and drawing
    them is the renderer's business.
    """

    @abstractmethod
    def render(self, frame: FrameOutput) -> None: pass

    @abstractmethod
    def close(self) -> None: pass
