from .multiview_stereo import MultiViewStereoFromKnownScene, MultiViewStereoResult

__all__ = ['MultiViewStereoFromKnownScene', 'MultiViewStereoResult']
