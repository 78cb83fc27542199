"""
Algorithms Module

Components of the multi-view stereo pipeline:
    geometry/   - Rigid transforms and stereo rectification
    scoring/    - Coverage score of a view acting as a "center"
    selection/  - Center ordering and cluster selection
    disparity/  - Pairwise and fused disparity
    cloud/      - Disparity images to a single point cloud
"""
