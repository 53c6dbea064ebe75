"""
Visualization modules: mesh drawing primitives, stats overlay and the 3D
point cloud viewer.
"""
