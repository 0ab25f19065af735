from .view_widget import FrameLoop, ShanshuiViewWidget, paint_frame

__all__ = ["FrameLoop", "ShanshuiViewWidget", "paint_frame"]
