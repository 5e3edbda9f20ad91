#!/usr/bin/env python3
# -*- coding: utf-8 -*-
#
# splitposter cuts a raster image into a grid of tiles, one per sheet of
# standard paper, and puts every tile centered on its own PDF page together
# with cutting guides and labels telling where the sheet belongs. The printed
# pages can then be trimmed and put together into a bigger poster.
#
# Copyright (C) 2019 Johannes 'josch' Schauer
#
# This program is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License version 3 as published by the
# Free Software Foundation.

from collections import OrderedDict, namedtuple
import math
import fitz
import sys
import argparse
import os.path
import platform
from io import BytesIO
import logging

from PIL import Image, UnidentifiedImageError

have_tkinter = True
try:
    import tkinter
    import tkinter.filedialog
    import tkinter.messagebox
except ImportError:
    have_tkinter = False

    class dummy:
        def __init__(self, *args, **kwargs):
            raise Exception("this functionality needs tkinter")

    tkinter = type("", (), {})()
    tkinter.Frame = dummy

VERSION = "0.1"

logger = logging.getLogger(__name__)


def mm_to_px(length, dpi=300):
    return round((length * dpi) / 25.4)


def px_to_mm(length, dpi=300):
    return (length * 25.4) / dpi


# width and height in mm, portrait
class PaperSpec(namedtuple("PaperSpec", ["name", "width", "height"])):
    __slots__ = ()

    # at 300 dpi A4 is 2480 x 3508 and A3 is 3508 x 4961
    def width_px(self, dpi=300):
        return mm_to_px(self.width, dpi)

    def height_px(self, dpi=300):
        return mm_to_px(self.height, dpi)


PAPER_SIZES = OrderedDict(
    [
        ("A4", PaperSpec("A4", 210, 297)),
        ("A3", PaperSpec("A3", 297, 420)),
    ]
)

LayoutPattern = namedtuple(
    "LayoutPattern", ["name", "rows", "cols", "paper", "landscape", "description"]
)

DIVISION_PATTERNS = OrderedDict(
    [
        (
            "A4_2x1",
            LayoutPattern(
                "2 A4 sheets (vertical)",
                2,
                1,
                "A4",
                False,
                "Divides the image into 2 portrait A4 sheets stacked vertically",
            ),
        ),
        (
            "A4_1x2",
            LayoutPattern(
                "2 A4 sheets (horizontal)",
                1,
                2,
                "A4",
                False,
                "Divides the image into 2 portrait A4 sheets side by side",
            ),
        ),
        (
            "A4_2x2",
            LayoutPattern(
                "4 A4 sheets (portrait)",
                2,
                2,
                "A4",
                False,
                "Divides the image into 4 A4 sheets (2x2) in portrait orientation",
            ),
        ),
        (
            "A4_2x2_H",
            LayoutPattern(
                "4 A4 sheets (landscape)",
                2,
                2,
                "A4",
                True,
                "Divides the image into 4 A4 sheets (2x2) in landscape orientation",
            ),
        ),
        (
            "A3_SINGLE",
            LayoutPattern(
                "1 A3 sheet",
                1,
                1,
                "A3",
                False,
                "Prints the whole image on a single A3 sheet",
            ),
        ),
        (
            "A3_2x1",
            LayoutPattern(
                "2 A3 sheets (vertical)",
                2,
                1,
                "A3",
                False,
                "Divides the image into 2 portrait A3 sheets stacked vertically",
            ),
        ),
        (
            "A3_1x2",
            LayoutPattern(
                "2 A3 sheets (horizontal)",
                1,
                2,
                "A3",
                False,
                "Divides the image into 2 portrait A3 sheets side by side",
            ),
        ),
        (
            "A3_2x2",
            LayoutPattern(
                "4 A3 sheets (portrait)",
                2,
                2,
                "A3",
                False,
                "Divides the image into 4 A3 sheets (2x2) in portrait orientation",
            ),
        ),
        (
            "A3_2x2_H",
            LayoutPattern(
                "4 A3 sheets (landscape)",
                2,
                2,
                "A3",
                True,
                "Divides the image into 4 A3 sheets (2x2) in landscape orientation",
            ),
        ),
    ]
)

# the only pattern allowed to consist of a single tile
SINGLE_SHEET_PATTERN = "A3_SINGLE"

DEFAULT_PATTERN = "A4_2x2"
DEFAULT_DPI = 300
DPI_OPTIONS = OrderedDict(
    [
        (150, "150 DPI - basic quality"),
        (300, "300 DPI - standard quality"),
        (600, "600 DPI - high quality"),
    ]
)

# margins are given in page units
EXPORT_MARGIN = 8
UI_MARGIN = 10
MARGINS = OrderedDict([("small", 5), ("medium", 10), ("large", 15)])

# the margin only limits the size of the placed tile, leaving a bit of room
# beyond the literal value
MARGIN_FACTOR = 1.2

GUIDE_LENGTH = 15
GUIDE_COLOR = (0.8, 0.8, 0.8)
CORNERS = ("top-left", "top-right", "bottom-left", "bottom-right")

LABEL_FONT = "helv"
LABEL_SIZE = 10
LABEL_COLOR = (0.5, 0.5, 0.5)
LABEL_INSET_X = 30
LABEL_INSET_Y = 20

SUPPORTED_FORMATS = OrderedDict(
    [
        ("JPEG", "*.jpg *.jpeg"),
        ("PNG", "*.png"),
        ("WEBP", "*.webp"),
        ("BMP", "*.bmp"),
    ]
)
# cameras write JPEG files with extra pictures which Pillow reports as MPO
FORMAT_ALIASES = {"MPO": "JPEG"}
MAX_FILE_SIZE = 50 * 1024 * 1024


class TileDescriptor(
    namedtuple(
        "TileDescriptor",
        ["row", "col", "width", "height", "part_number", "total_parts", "paper", "dpi"],
    )
):
    __slots__ = ()

    # position of the tile in the source image
    @property
    def x(self):
        return self.col * self.width

    @property
    def y(self):
        return self.row * self.height


Rect = namedtuple("Rect", ["x", "y", "width", "height"])
Segment = namedtuple("Segment", ["start", "end"])
Label = namedtuple("Label", ["text", "x", "y", "size"])
PageLayout = namedtuple(
    "PageLayout",
    ["page_width", "page_height", "placement", "scale", "guides", "labels"],
)
Preview = namedtuple(
    "Preview",
    ["part_number", "total_parts", "paper", "row", "col", "width", "height", "data"],
)


class SplitPosterException(Exception):
    pass


class InputError(SplitPosterException):
    pass


class NoSourceImage(InputError):
    pass


class UnsupportedFormat(InputError):
    pass


class FileTooLarge(InputError):
    pass


class ImageTooSmall(InputError):
    pass


class LayoutError(SplitPosterException):
    pass


class UnknownPattern(LayoutError):
    pass


class CompositionError(SplitPosterException):
    pass


class ImageEmbedError(CompositionError):
    pass


class ExportCancelled(CompositionError):
    pass


def format_file_size(size):
    if size == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(size, 1024))), len(units) - 1)
    return "%g %s" % (round(size / 1024 ** i, 2), units[i])


def fit_size(width, height, max_width, max_height):
    """Largest integer size with the aspect ratio of width x height that fits
    into max_width x max_height."""
    ratio = width / height
    if ratio > max_width / max_height:
        new_width = max_width
        new_height = max_width / ratio
    else:
        new_height = max_height
        new_width = max_height * ratio
    return int(new_width), int(new_height)


def output_filename(filename):
    base, _ = os.path.splitext(os.path.basename(filename))
    return os.path.join(os.path.dirname(filename), base + "_divided.pdf")


def get_pattern(pattern_id):
    try:
        return DIVISION_PATTERNS[pattern_id]
    except (KeyError, TypeError):
        raise UnknownPattern("unknown division pattern: %s" % (pattern_id,))


def resolve_pattern(pattern_id):
    """Look up a pattern, substituting the default one for unknown ids."""
    if isinstance(pattern_id, LayoutPattern):
        return pattern_id
    try:
        return get_pattern(pattern_id)
    except UnknownPattern as e:
        logger.warning("%s, falling back to %s", e, DEFAULT_PATTERN)
        return DIVISION_PATTERNS[DEFAULT_PATTERN]


class SourceImage:
    """Decoded raster image the tiles are cut from."""

    def __init__(self, image, name=None, size=None):
        self.image = image
        self.name = name
        self.size = size

    @classmethod
    def open(cls, infile, name=None):
        if infile is None:
            raise NoSourceImage("no image loaded")
        if hasattr(infile, "read"):
            # Pillow needs to seek() so we slurp in the whole input
            data = infile.read()
            size = len(data)
            fp = BytesIO(data)
            if name is None:
                name = getattr(infile, "name", None)
        else:
            try:
                size = os.path.getsize(infile)
            except OSError as e:
                raise NoSourceImage("cannot read %s: %s" % (infile, e)) from e
            fp = infile
            if name is None:
                name = infile
        if size > MAX_FILE_SIZE:
            raise FileTooLarge(
                "file too large: %s (maximum size: %s)"
                % (format_file_size(size), format_file_size(MAX_FILE_SIZE))
            )
        try:
            image = Image.open(fp)
        except UnidentifiedImageError as e:
            raise UnsupportedFormat("cannot identify image file") from e
        except OSError as e:
            raise NoSourceImage("cannot read %s: %s" % (name, e)) from e
        if FORMAT_ALIASES.get(image.format, image.format) not in SUPPORTED_FORMATS:
            image.close()
            raise UnsupportedFormat(
                "unsupported image format %s (supported: %s)"
                % (image.format, ", ".join(SUPPORTED_FORMATS))
            )
        try:
            image.load()
        except OSError as e:
            image.close()
            raise NoSourceImage("cannot decode image: %s" % e) from e
        logger.debug(
            "loaded %s image %s of %dx%d pixels",
            image.format,
            name,
            image.width,
            image.height,
        )
        return cls(image, name=name, size=size)

    @property
    def width(self):
        return self.image.width

    @property
    def height(self):
        return self.image.height

    @property
    def format(self):
        return self.image.format

    def crop(self, x, y, width, height):
        img = self.image.crop((x, y, x + width, y + height))
        # PNG cannot store CMYK or YCbCr
        if img.mode not in ("1", "L", "LA", "P", "RGB", "RGBA"):
            img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
        return img

    def extract(self, x, y, width, height):
        with BytesIO() as output:
            self.crop(x, y, width, height).save(output, format="PNG")
            return output.getvalue()


def image_info(image):
    if image is None:
        return None
    return {
        "width": image.width,
        "height": image.height,
        "aspect_ratio": image.width / image.height,
        "size": image.size,
    }


def partition(width, height, pattern, dpi=DEFAULT_DPI):
    if width is None or height is None:
        raise NoSourceImage("no image loaded")
    if width <= 0 or height <= 0:
        raise NoSourceImage("image has no pixels: %sx%s" % (width, height))
    if dpi <= 0:
        raise LayoutError("dpi must be positive: %s" % dpi)
    if not isinstance(pattern, LayoutPattern):
        pattern = get_pattern(pattern)
    rows, cols = pattern.rows, pattern.cols
    if width < cols or height < rows:
        raise ImageTooSmall(
            "image of %dx%d pixels is smaller than the %dx%d grid"
            % (width, height, cols, rows)
        )

    # the remainder of the division is dropped from the last row and column,
    # so all tiles have the same size
    tile_width = width // cols
    tile_height = height // rows
    total = rows * cols

    tiles = []
    for row in range(rows):
        for col in range(cols):
            tiles.append(
                TileDescriptor(
                    row,
                    col,
                    tile_width,
                    tile_height,
                    row * cols + col + 1,
                    total,
                    pattern.paper,
                    dpi,
                )
            )
    logger.debug(
        "partitioned %dx%d into %d tiles of %dx%d",
        width,
        height,
        total,
        tile_width,
        tile_height,
    )
    return tiles


def corner_guides(page_width, page_height, margin, corners=CORNERS):
    # every corner gets an L made from one horizontal and one vertical line
    # with both arms pointing into the page
    left, right = margin, page_width - margin
    top, bottom = margin, page_height - margin
    anchors = {
        "top-left": (left, top, 1, 1),
        "top-right": (right, top, -1, 1),
        "bottom-left": (left, bottom, 1, -1),
        "bottom-right": (right, bottom, -1, -1),
    }
    guides = []
    for corner in corners:
        x, y, dx, dy = anchors[corner]
        guides.append(Segment((x, y), (x + dx * GUIDE_LENGTH, y)))
        guides.append(Segment((x, y), (x, y + dy * GUIDE_LENGTH)))
    return guides


def layout_page(
    tile,
    paper,
    landscape=False,
    margin=EXPORT_MARGIN,
    page_index=0,
    page_count=1,
    guides=True,
    page_numbers=True,
    part_info=True,
    corners=CORNERS,
):
    if isinstance(paper, str):
        paper = PAPER_SIZES[paper]
    page_width = paper.width_px(tile.dpi)
    page_height = paper.height_px(tile.dpi)
    if landscape:
        page_width, page_height = page_height, page_width

    usable_width = page_width - margin * MARGIN_FACTOR
    usable_height = page_height - margin * MARGIN_FACTOR
    scale = min(usable_width / tile.width, usable_height / tile.height)
    final_width = tile.width * scale
    final_height = tile.height * scale

    # centered on the whole page, the margin is not an offset
    placement = Rect(
        (page_width - final_width) / 2,
        (page_height - final_height) / 2,
        final_width,
        final_height,
    )

    segments = []
    if guides:
        segments = corner_guides(page_width, page_height, margin, corners)

    labels = []
    if page_numbers:
        text = "Page %d of %d" % (page_index + 1, page_count)
        text_width = fitz.get_text_length(
            text, fontname=LABEL_FONT, fontsize=LABEL_SIZE
        )
        labels.append(
            Label(
                text,
                page_width - text_width - LABEL_INSET_X,
                page_height - LABEL_INSET_Y,
                LABEL_SIZE,
            )
        )
    if part_info:
        text = "Position: Row %d, Column %d | %s | %d DPI" % (
            tile.row + 1,
            tile.col + 1,
            tile.paper,
            tile.dpi,
        )
        labels.append(Label(text, LABEL_INSET_X, LABEL_INSET_Y, LABEL_SIZE))

    return PageLayout(page_width, page_height, placement, scale, segments, labels)


class PdfSurface:
    """Multi-page PDF document built one page at a time."""

    def __init__(self):
        self.doc = fitz.open()
        self.doc.set_metadata(
            {
                "title": "Image divided for printing",
                "author": "splitposter",
                "subject": "Image divided into multiple pages",
                "creator": "splitposter " + VERSION,
                "producer": "PyMuPDF",
            }
        )
        self.page = None

    def __len__(self):
        return self.doc.page_count

    def create_page(self, width, height):
        self.page = self.doc.new_page(-1, width=width, height=height)
        return self.page

    def embed_image_payload(self, payload):
        try:
            return fitz.Pixmap(payload)
        except Exception as e:
            raise ImageEmbedError("cannot embed image: %s" % e) from e

    def draw_image(self, handle, rect):
        self.page.insert_image(
            fitz.Rect(rect.x, rect.y, rect.x + rect.width, rect.y + rect.height),
            pixmap=handle,
        )

    def draw_line(self, start, end, color=GUIDE_COLOR, width=1):
        shape = self.page.new_shape()
        shape.draw_line(fitz.Point(*start), fitz.Point(*end))
        shape.finish(color=color, width=width)
        shape.commit()

    def draw_text(
        self, text, x, y, size=LABEL_SIZE, font=LABEL_FONT, color=LABEL_COLOR
    ):
        self.page.insert_text(
            fitz.Point(x, y), text, fontsize=size, fontname=font, color=color
        )

    def finalize(self):
        return self.doc.tobytes(garbage=4, deflate=True)

    def save(self, outfile):
        if hasattr(outfile, "write"):
            # outfile is an object with a write() method
            outfile.write(self.finalize())
        else:
            # outfile is used as a filename
            self.doc.save(outfile, garbage=4, deflate=True)

    def close(self):
        self.doc.close()


def render_page(surface, layout, payload):
    surface.create_page(layout.page_width, layout.page_height)
    handle = surface.embed_image_payload(payload)
    surface.draw_image(handle, layout.placement)
    for segment in layout.guides:
        surface.draw_line(segment.start, segment.end, color=GUIDE_COLOR)
    for label in layout.labels:
        surface.draw_text(label.text, label.x, label.y, size=label.size)


def export(
    image,
    outfile=None,
    pattern=DEFAULT_PATTERN,
    dpi=DEFAULT_DPI,
    margin=EXPORT_MARGIN,
    guides=True,
    page_numbers=True,
    part_info=True,
    cancel=None,
    progress=None,
):
    """Divide image according to pattern and write one page per tile.

    Without outfile the PDF is returned as bytes. Nothing is written unless
    all pages were composed: an embedding failure or cancel() returning true
    between two pages aborts the whole export.
    """
    if image is None:
        raise NoSourceImage("no image loaded")
    pattern = resolve_pattern(pattern)
    paper = PAPER_SIZES[pattern.paper]
    tiles = partition(image.width, image.height, pattern, dpi)

    surface = PdfSurface()
    try:
        for i, tile in enumerate(tiles):
            if cancel is not None and cancel():
                raise ExportCancelled(
                    "export cancelled after %d of %d pages" % (i, len(tiles))
                )
            layout = layout_page(
                tile,
                paper,
                landscape=pattern.landscape,
                margin=margin,
                page_index=i,
                page_count=len(tiles),
                guides=guides,
                page_numbers=page_numbers,
                part_info=part_info,
            )
            payload = image.extract(tile.x, tile.y, tile.width, tile.height)
            render_page(surface, layout, payload)
            logger.debug(
                "page %d: tile %dx%d scaled by %f to %.1f mm x %.1f mm at "
                "(%.2f, %.2f)",
                tile.part_number,
                tile.width,
                tile.height,
                layout.scale,
                px_to_mm(layout.placement.width, tile.dpi),
                px_to_mm(layout.placement.height, tile.dpi),
                layout.placement.x,
                layout.placement.y,
            )
            if progress is not None:
                progress(i + 1, len(tiles))
        if outfile is None:
            return surface.finalize()
        surface.save(outfile)
    finally:
        surface.close()


def generate_previews(image, pattern=DEFAULT_PATTERN, size=200):
    if image is None:
        return []
    pattern = resolve_pattern(pattern)
    previews = []
    for tile in partition(image.width, image.height, pattern):
        width, height = fit_size(tile.width, tile.height, size, size)
        img = image.crop(tile.x, tile.y, tile.width, tile.height)
        img = img.resize((max(width, 1), max(height, 1)))
        with BytesIO() as output:
            img.save(output, format="PNG")
            data = output.getvalue()
        previews.append(
            Preview(
                tile.part_number,
                tile.total_parts,
                tile.paper,
                tile.row,
                tile.col,
                width,
                height,
                data,
            )
        )
    return previews


class Application(tkinter.Frame):
    def __init__(self, master=None):
        super().__init__(master)
        self.master = master
        self.master.title("splitposter")
        self.image = None
        self.filename = None

        self.pack(fill=tkinter.BOTH, expand=tkinter.TRUE)

        self.canvas = tkinter.Canvas(self, bg="black")
        self.canvas.pack(fill=tkinter.BOTH, side=tkinter.LEFT, expand=tkinter.TRUE)
        self.canvas_size = self.canvas.winfo_width(), self.canvas.winfo_height()
        self.canvas.bind("<Configure>", self.on_resize)

        frame_right = tkinter.Frame(self)
        frame_right.pack(side=tkinter.TOP, expand=tkinter.TRUE, fill=tkinter.Y)

        tkinter.Button(
            frame_right, text="Open image", command=self.on_open_button
        ).pack(fill=tkinter.X)

        self.info = tkinter.Label(frame_right, text="No image loaded")
        self.info.pack(fill=tkinter.X)

        self.variables = {
            "pattern": tkinter.StringVar(value=DIVISION_PATTERNS[DEFAULT_PATTERN].name),
            "dpi": tkinter.StringVar(value=DPI_OPTIONS[DEFAULT_DPI]),
            "margin": tkinter.StringVar(
                value=[k for k, v in MARGINS.items() if v == UI_MARGIN][0]
            ),
            "guides": tkinter.IntVar(value=1),
            "numbers": tkinter.IntVar(value=1),
        }

        pattern_group = tkinter.LabelFrame(frame_right, text="Division pattern")
        pattern_group.pack(fill=tkinter.X)
        tkinter.OptionMenu(
            pattern_group,
            self.variables["pattern"],
            *[p.name for p in DIVISION_PATTERNS.values()],
            command=self.on_option
        ).pack(fill=tkinter.X)
        self.description = tkinter.Label(
            pattern_group,
            text=DIVISION_PATTERNS[DEFAULT_PATTERN].description,
            wraplength=220,
            justify=tkinter.LEFT,
        )
        self.description.pack(fill=tkinter.X)

        option_group = tkinter.LabelFrame(frame_right, text="Output options")
        option_group.pack(fill=tkinter.X)
        tkinter.Label(option_group, text="Resolution:").grid(
            row=0, column=0, sticky=tkinter.W
        )
        tkinter.OptionMenu(
            option_group,
            self.variables["dpi"],
            *DPI_OPTIONS.values(),
            command=self.on_option
        ).grid(row=0, column=1, sticky=tkinter.W)
        tkinter.Label(option_group, text="Margin:").grid(
            row=1, column=0, sticky=tkinter.W
        )
        tkinter.OptionMenu(
            option_group, self.variables["margin"], *MARGINS.keys()
        ).grid(row=1, column=1, sticky=tkinter.W)
        tkinter.Checkbutton(
            option_group, text="Print cutting guides", variable=self.variables["guides"]
        ).grid(row=2, column=0, columnspan=2, sticky=tkinter.W)
        tkinter.Checkbutton(
            option_group, text="Print page numbers", variable=self.variables["numbers"]
        ).grid(row=3, column=0, columnspan=2, sticky=tkinter.W)

        bottom_frame = tkinter.Frame(frame_right)
        bottom_frame.pack(side=tkinter.BOTTOM, fill=tkinter.X)

        self.save_button = tkinter.Button(
            bottom_frame,
            text="Save PDF",
            command=self.on_save_button,
            state=tkinter.DISABLED,
        )
        self.save_button.pack(side=tkinter.LEFT, expand=tkinter.TRUE, fill=tkinter.X)

        quit_button = tkinter.Button(
            bottom_frame, text="Exit", command=self.master.destroy
        )
        quit_button.pack(side=tkinter.RIGHT, expand=tkinter.TRUE, fill=tkinter.X)

    @property
    def pattern_id(self):
        name = self.variables["pattern"].get()
        for pattern_id, pattern in DIVISION_PATTERNS.items():
            if pattern.name == name:
                return pattern_id
        return DEFAULT_PATTERN

    @property
    def dpi(self):
        label = self.variables["dpi"].get()
        for dpi, text in DPI_OPTIONS.items():
            if text == label:
                return dpi
        return DEFAULT_DPI

    def on_option(self, value):
        self.description.configure(text=resolve_pattern(self.pattern_id).description)
        self.draw()

    def on_resize(self, event):
        self.canvas_size = (event.width, event.height)
        self.draw()

    def draw(self):
        # clean canvas
        self.canvas.delete(tkinter.ALL)

        if self.image is None:
            self.canvas.create_text(
                self.canvas_size[0] / 2,
                self.canvas_size[1] / 2,
                text='Click on the "Open image" button in the upper right.',
                fill="white",
            )
            return

        canvas_padding = 10
        if (
            self.canvas_size[0] <= canvas_padding
            or self.canvas_size[1] <= canvas_padding
        ):
            return

        width, height = fit_size(
            self.image.width,
            self.image.height,
            self.canvas_size[0] - canvas_padding,
            self.canvas_size[1] - canvas_padding,
        )
        if width < 1 or height < 1:
            return
        zoom = width / self.image.width
        x0 = (self.canvas_size[0] - width) / 2
        y0 = (self.canvas_size[1] - height) / 2

        img = self.image.image.convert("RGB").resize((width, height))
        with BytesIO() as output:
            img.save(output, format="PPM")
            tkimg = tkinter.PhotoImage(data=output.getvalue())
        self.canvas.create_image(x0, y0, anchor=tkinter.NW, image=tkimg)
        self.canvas.image = tkimg

        # draw one rectangle with its part number per tile
        for tile in partition(
            self.image.width, self.image.height, self.pattern_id, self.dpi
        ):
            left = x0 + tile.x * zoom
            top = y0 + tile.y * zoom
            self.canvas.create_rectangle(
                left,
                top,
                left + tile.width * zoom,
                top + tile.height * zoom,
                outline="red",
            )
            self.canvas.create_text(
                left + tile.width * zoom / 2,
                top + tile.height * zoom / 2,
                text="%d of %d" % (tile.part_number, tile.total_parts),
                fill="red",
                font=("TkDefaultFont", 20),
            )

    def on_open_button(self):
        patterns = " ".join(SUPPORTED_FORMATS.values())
        filetypes = [("all supported", patterns)]
        for fmt, fmt_patterns in SUPPORTED_FORMATS.items():
            filetypes.append(("%s images" % fmt.lower(), fmt_patterns))
        filetypes.append(("all files", "*"))
        filename = tkinter.filedialog.askopenfilename(
            parent=self.master, title="Open a raster image", filetypes=filetypes
        )
        if filename in ((), ""):
            return
        self.open_file(filename)

    def open_file(self, filename):
        try:
            image = SourceImage.open(filename)
        except InputError as e:
            tkinter.messagebox.showerror(title="Cannot open image", message=str(e))
            return
        self.filename = filename
        self.image = image
        self.info.configure(
            text="%s (%s)"
            % (os.path.basename(filename), format_file_size(image.size))
        )
        self.draw()
        self.save_button.configure(state=tkinter.NORMAL)

    def on_save_button(self):
        filename = tkinter.filedialog.asksaveasfilename(
            parent=self.master,
            title="Save as PDF",
            defaultextension=".pdf",
            filetypes=[("pdf documents", "*.pdf"), ("all files", "*")],
            initialdir=os.path.dirname(self.filename),
            initialfile=os.path.basename(output_filename(self.filename)),
        )
        if filename in ((), ""):
            return
        try:
            export(
                self.image,
                filename,
                pattern=self.pattern_id,
                dpi=self.dpi,
                margin=MARGINS[self.variables["margin"].get()],
                guides=bool(self.variables["guides"].get()),
                page_numbers=bool(self.variables["numbers"].get()),
            )
        except SplitPosterException as e:
            tkinter.messagebox.showerror(
                title="Error generating PDF", message=str(e)
            )


def convert(infile, outfile, pattern=DEFAULT_PATTERN, **kwargs):
    image = SourceImage.open(infile)
    return export(image, outfile, pattern=pattern, **kwargs)


def gui(filename=None):
    if not have_tkinter:
        raise Exception("the GUI requires tkinter")
    root = tkinter.Tk()
    app = Application(master=root)
    if filename is not None:
        app.open_file(filename)
    app.mainloop()


def parse_margin(string):
    if string.lower() in MARGINS:
        return MARGINS[string.lower()]
    try:
        margin = float(string)
    except ValueError:
        msg = (
            "margin is neither a floating point number nor one of %s: %s"
            % (", ".join(MARGINS), string)
        )
        raise argparse.ArgumentTypeError(msg)
    if margin < 0:
        raise argparse.ArgumentTypeError("margin must not be negative: %s" % string)
    return margin


def parse_dpi(string):
    try:
        dpi = int(string)
    except ValueError:
        raise argparse.ArgumentTypeError("dpi is not an integer: %s" % string)
    if dpi <= 0:
        raise argparse.ArgumentTypeError("dpi must be positive: %s" % string)
    return dpi


def render_patterns():
    rendered = ""
    for k, v in DIVISION_PATTERNS.items():
        rendered += "    %-10s %d x %d %s %-9s %s\n" % (
            k,
            v.rows,
            v.cols,
            v.paper,
            "landscape" if v.landscape else "portrait",
            v.name,
        )
    return rendered


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    if len(argv) == 0 and platform.system() != "Windows":
        print(
            """
You called splitposter without arguments. It will read an image from standard
input and write the PDF to standard output. Maybe you meant to run the
splitposter GUI instead? To run the graphical user interface, run splitposter
with the --gui option.
""",
            file=sys.stderr,
        )

    parser = argparse.ArgumentParser(
        prog="splitposter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""\
Print a large image on multiple sheets of paper.

splitposter divides a raster image into a grid of equally sized tiles and puts
every tile on its own page of a PDF document, scaled to fit the paper and
centered on it. Each page carries small corner marks for trimming, its page
number and the row and column it belongs to, so that the printed sheets can be
put together into a poster.

Options:
""",
        epilog="""\
Division patterns:
  The --pattern option selects how the image is divided. Every pattern
  defines the number of rows and columns, the paper size and the orientation
  of the pages:

%s
Tiles:
  All tiles of a pattern have the same size. If the image width or height is
  not divisible by the number of columns or rows, the remaining pixels at the
  right or bottom edge of the image are not printed.

Examples:

    $ splitposter --pattern A3_2x2 --output=poster.pdf photo.jpg

This will create a file poster.pdf with four DIN A3 pages. Without --output
the result is written to photo_divided.pdf next to the input. Only the last
extension is replaced, so my.photo.jpg becomes my.photo_divided.pdf.

Supported input formats: %s (up to %s)
"""
        % (
            render_patterns(),
            ", ".join(SUPPORTED_FORMATS),
            format_file_size(MAX_FILE_SIZE),
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Makes the program operate in verbose mode, printing messages on "
        "standard error.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version="%(prog)s " + VERSION,
        help="Prints version information and exits.",
    )
    gui_group = parser.add_mutually_exclusive_group(required=False)
    gui_group.add_argument(
        "--gui", dest="gui", action="store_true", help="run tkinter gui"
    )
    gui_group.add_argument(
        "--nogui",
        dest="gui",
        action="store_false",
        help="don't run tkinter gui (default)",
    )
    parser.set_defaults(gui=False)

    parser.add_argument(
        "-o",
        "--output",
        help="output filename (default: input name with _divided.pdf suffix, "
        "stdout if reading from stdin)",
    )
    parser.add_argument("input", nargs="?", help="input filename (default: stdin)")
    parser.add_argument(
        "--pattern",
        default=DEFAULT_PATTERN,
        help="Division pattern, see below. Unknown patterns fall back to the "
        "default (default: %s)" % DEFAULT_PATTERN,
    )
    parser.add_argument(
        "--list-patterns",
        action="store_true",
        help="Print the available division patterns and exit.",
    )
    parser.add_argument(
        "--dpi",
        type=parse_dpi,
        default=DEFAULT_DPI,
        help="Resolution used to compute the page size from the paper size. "
        "Common values are %s (default: %d)"
        % (", ".join(str(d) for d in DPI_OPTIONS), DEFAULT_DPI),
    )
    parser.add_argument(
        "--margin",
        type=parse_margin,
        default=EXPORT_MARGIN,
        help="Margin in page units that limits how large a tile is placed on "
        "its page, also used to position the cutting guides. Either a number "
        "or one of %s (default: %d)" % (", ".join(MARGINS), EXPORT_MARGIN),
    )
    parser.add_argument(
        "--no-guides",
        dest="guides",
        action="store_false",
        help="Do not print the corner marks for trimming.",
    )
    parser.add_argument(
        "--no-page-numbers",
        dest="page_numbers",
        action="store_false",
        help='Do not print "Page N of M" at the bottom of each page.',
    )
    parser.add_argument(
        "--no-part-info",
        dest="part_info",
        action="store_false",
        help="Do not print the row and column of the tile at the top of each "
        "page.",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    if args.list_patterns:
        sys.stdout.write(render_patterns())
        return 0

    if args.gui:
        gui(args.input)
        return 0

    if not args.input or args.input == "-":
        args.input = sys.stdin.buffer
        if not args.output:
            args.output = "-"

    if not args.output:
        args.output = output_filename(args.input)
    if args.output == "-":
        args.output = sys.stdout.buffer

    try:
        convert(
            args.input,
            args.output,
            pattern=args.pattern,
            dpi=args.dpi,
            margin=args.margin,
            guides=args.guides,
            page_numbers=args.page_numbers,
            part_info=args.part_info,
        )
    except SplitPosterException as e:
        print("Error generating PDF: %s" % e, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

__all__ = [
    "partition",
    "layout_page",
    "render_page",
    "export",
    "convert",
    "SourceImage",
    "PdfSurface",
]
