[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "framekit"
version = "0.1.0"
description = "Command-line tools for comparing pictures and raw YUV video frames: grids, difference images, VMAF charts and MSE/PSNR/DCT-hash reports."
requires-python = ">=3.10"
keywords = ["video", "yuv", "psnr", "mse", "vmaf", "perceptual hash", "image diff"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Scientific/Engineering :: Image Processing",
]
dependencies = [
    "numpy",
    "pillow",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
pic2x2 = "framekit.pic2x2:main"
picdiff = "framekit.picdiff:main"
picvmaf = "framekit.picvmaf:main"
yuvmse = "framekit.yuvmse:main"

[tool.hatch.build.targets.wheel]
packages = ["framekit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
