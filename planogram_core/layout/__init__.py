from .editor import EditorState, LayoutEditor

__all__ = ['EditorState', 'LayoutEditor']
