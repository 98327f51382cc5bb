"""Session and geometry layer.

Qt-free state and arithmetic behind the snipping window: the drag-to-crop
mapping (`crop_controller`) and the editing session (`session`).
"""
