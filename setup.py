"""
Setup script for the Multi-View Stereo dense reconstruction package.
"""

from setuptools import setup, find_packages
import os


def read_readme():
    """Read README file for long description."""
    if os.path.exists('README.md'):
        with open('README.md', 'r', encoding='utf-8') as f:
            return f.read()
    return "Dense point clouds from images with known camera poses"


# Core requirements (always installed)
install_requires = [
    'opencv-python>=4.5.0',
    'numpy>=1.19.0',
    'scipy>=1.6.0'
]

# Optional dependencies for different use cases
extras_require = {
    'export': [
        'open3d>=0.15.0'
    ],
    'dev': [
        'pytest>=6.0.0',
        'pytest-cov>=2.12.0'
    ],
    'all': [
        'open3d>=0.15.0',
        'pytest>=6.0.0',
        'pytest-cov>=2.12.0'
    ]
}

setup(
    name="multiview-stereo",
    version="1.0.0",
    author="3D Reconstruction Team",
    description="Multi-view stereo: fused disparity clusters merged into one dense point cloud",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=['tests', 'tests.*']),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Image Processing",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.8",
    install_requires=install_requires,
    extras_require=extras_require,
    keywords=[
        "computer vision",
        "multi-view stereo",
        "disparity",
        "point cloud",
        "3d reconstruction",
        "opencv"
    ]
)
