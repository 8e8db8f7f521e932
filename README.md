# framekit

Small command-line tools for checking video quality by eye and by number.
There are four of them:

| Command   | What it does                                                                     |
|-----------|----------------------------------------------------------------------------------|
| `pic2x2`  | Puts up to four pictures together in a 2x2 grid                                  |
| `picdiff` | Writes the absolute difference of two pictures as an image                       |
| `picvmaf` | Draws a per-frame VMAF chart from a CSV file, with a cursor on one frame         |
| `yuvmse`  | Compares two raw YUV 4:2:0 files frame by frame (MSE, PSNR, sharpness, DCT hash) |

All images are written as uncompressed PNG. Each command prints its usage and
exits with status 1 when run without arguments or with an unknown option.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## pic2x2

```
pic2x2 -1 topleft.png -2 topright.png -3 bottomleft.png -4 bottomright.png -o grid.png
```

Every cell is as large as the largest input; a smaller picture sits in the
top-left corner of its cell. A position you leave out stays black. At least
one input and `-o` are required. Options:

- `-1` … `-4` the picture for the top-left, top-right, bottom-left and bottom-right cell
- `-o` output PNG
- `-t N` write each file name into its picture (default `1`, `0` turns it off)
- `-v` print the input and output resolutions

## picdiff

```
picdiff -1 reference.png -2 encoded.png -o diff.png
```

Both pictures must have the same size. Options:

- `-1`, `-2` the two pictures to compare
- `-n` stretch the difference linearly so its minimum becomes 150 and its maximum 255, so it shows as grey instead of near-black
- `-o` output PNG
- `-t N` write the output file name into the image (default `1`)
- `-v` print the input and output resolutions

## picvmaf

```
picvmaf -i vmaf.csv -c 120 -o chart.png
```

The input is a CSV file with one frame per line in the form
`frame_number,vmaf_score,aggregate_score`. Lines that start with a space,
`;` or `#` are ignored. Reading stops at the first line that does not have
that form; every data line after it still counts as a frame, with a score of
zero. The chart is 1920x1080, with one green bar per frame (taller for a
higher score) and a red cursor at the frame given with `-c`, which must be a
frame in the file.

Options:

- `-i` the CSV file
- `-c N` frame number to put the cursor on (default `0`)
- `-o` output PNG
- `-t N` write the output file name and the cursor frame's score and average into the chart (default `1`)
- `-v` print the frame count, the lowest score, and the created file

## yuvmse

```
yuvmse -1 first.yuv -2 second.yuv
```

Reads two raw planar YUV 4:2:0 files. The frame size defaults to 1920x1080.
For each input, every common format (720x480, 720x576, 1280x720, 1920x1080,
3840x2160) whose frame size divides the file size is listed; if exactly one
fits and no `-W`/`-H` was given, that size is used. Otherwise you are asked to
pass the dimensions.

By default both files must have the same size, a whole number of frames, and
it prints one line per frame with the Y, U and V mean squared error and PSNR,
the sharpness (variance of the Laplacian) of both luma planes, their DCT
hashes, the Hamming distance between the hashes and an assessment:
`Exact Match`, `Near Identical` (distance up to 10) or `Different`. A header
is repeated every 26 lines.

Options:

- `-1`, `-2` the two YUV files
- `-W`, `-H` frame width and height in pixels
- `-b` best match: for each frame of file 1, search frames of file 2 in the window for the lowest luma MSE and print it
- `-D` DCT hash match: find the longest run of frames whose hashes differ by at most two bits, and print `dd` commands that would trim the files into alignment
- `-w N` number of frames to process after the skipped ones (default `30`)
- `-s N` frames to skip before matching (file 1 in best match mode, both files in DCT hash mode)
- `-v` print per-frame details

## Using it as a library

The measurements behind `yuvmse` are available from `framekit.framestats`:

```python
import numpy as np
from framekit.framestats import dct_hash, hamming_distance, plane_mse, psnr

a = np.zeros((64, 64), dtype=np.uint8)
b = a.copy()
b[10:20, 10:20] = 255

mse = plane_mse(a, b)
print(mse, psnr(mse, 255.0))
print(hamming_distance(dct_hash(a), dct_hash(b)))
```

`framestats` also has `split_planes`, `compute_frame_stats`, `sharpness`,
`resize_area`, `detect_frame_formats` and `find_longest_match`.
`framekit.yuvmse` exposes the three modes as `sequence_mse`,
`sequence_bestmatch` and `sequence_dct_hashes`, each taking a `Settings`
object and an optional text stream, and raising `YuvError` when the files
cannot be compared.

`framekit.canvas` has `load_image`, `put_title` and `save_png` for working
with pictures; `framekit.picdiff` has `absolute_difference` and
`normalize_minmax`, `framekit.pic2x2` has `compose_grid`, and
`framekit.picvmaf` has `read_vmaf_csv`, `render_chart` and `annotate_chart`.

## What it does not do

- `picvmaf` does not compute VMAF scores; it only charts scores you have
  already measured and converted to CSV.
- `yuvmse` reads only planar 8-bit YUV 4:2:0 files without headers.
- Titles are drawn with Pillow's built-in default font.