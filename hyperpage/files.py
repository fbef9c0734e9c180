"""
File declarations and images.

A file declaration is a comma-separated list of glob patterns. Relative patterns are resolved against
the directory of a page, absolute ones (with a leading "/") against the base directory of the site.
Resolved files are reported as paths relative to the base directory, always with a leading "/".
"""

import os, glob, hashlib, logging, posixpath

from PIL import Image, ImageOps, UnidentifiedImageError

from hyperpage import config


log = logging.getLogger(__name__)


#####################################################################################################################################################
#####
#####  FILE DECLARATIONS
#####

def page_dir(page, base_dir):
    """Absolute path of the directory of `page`."""
    path = page.path if page is not None else '/'
    return base_dir.rstrip('/') + config.DIR_PAGES + path

def resolve(declaration, page, base_dir, first_only = False):
    """
    List of files matching a file `declaration` (see module docstring), relative to `page`.
    Data files of pages are never included. Matches of every pattern are sorted; patterns keep their order.
    If `first_only` is true, only the first match of each pattern is returned.
    """
    if not declaration or base_dir is None:
        return []

    base  = base_dir.rstrip('/')
    found = []

    for pattern in str(declaration).split(','):
        pattern = pattern.strip()
        if not pattern: continue
        if pattern.startswith('/'):
            full = base + pattern
        else:
            full = os.path.join(page_dir(page, base), pattern)

        matches = sorted(m for m in glob.glob(full) if os.path.isfile(m) and not m.endswith(config.DATA_FILE_EXT))
        if first_only:
            matches = matches[:1]

        for match in matches:
            rel = '/' + os.path.relpath(match, base).replace(os.sep, '/')
            if rel not in found:
                found.append(rel)

    log.debug("file declaration %r resolved to %s", declaration, found)
    return found


#####################################################################################################################################################
#####
#####  IMAGES
#####

def is_image(path):
    ext = posixpath.splitext(path)[1].lstrip('.').lower()
    return ext in config.IMAGE_EXTENSIONS

def image_size(path):
    """(width, height) of an image file at absolute `path`; None if the file is not a readable image."""
    try:
        with Image.open(path) as img:
            return img.size
    except (OSError, UnidentifiedImageError) as ex:
        log.warning("can't read image size of '%s': %s", path, ex)
        return None

def _as_int(value):
    if value in (None, False, ''): return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None

def target_size(width, height, max_width = None, max_height = None, crop = False):
    """
    Dimensions of a resized image. With `crop` and both bounds given, the result has exactly the requested size.
    Otherwise, the image is scaled down proportionally to fit in the bounds; images are never upscaled.
    """
    if crop and max_width and max_height:
        return max_width, max_height

    scales = []
    if max_width:  scales.append(max_width / width)
    if max_height: scales.append(max_height / height)
    scale = min(scales + [1.0])

    return max(1, round(width * scale)), max(1, round(height * scale))

def resize(base_dir, file, width = None, height = None, crop = False):
    """
    Create (or reuse) a resized copy of an image `file` (relative to `base_dir`) in the cache directory.
    Return a triple (resized_file, width, height), where resized_file is relative to `base_dir`;
    None if the source image can't be read.
    """
    base   = base_dir.rstrip('/')
    source = base + file
    width, height, crop = _as_int(width), _as_int(height), bool(crop)

    try:
        with Image.open(source) as img:
            w, h = target_size(img.width, img.height, width, height, crop)
            if (w, h) == img.size:
                return file, w, h

            stem, ext = posixpath.splitext(posixpath.basename(file))
            digest = hashlib.md5(f"{file}:{os.path.getmtime(source)}:{w}x{h}:{crop}".encode('utf-8')).hexdigest()[:10]
            resized = f"{config.DIR_CACHE}/images/{stem}-{w}x{h}-{digest}{ext.lower()}"
            target = base + resized

            if not os.path.exists(target):
                os.makedirs(os.path.dirname(target), exist_ok = True)
                out = ImageOps.fit(img, (w, h)) if crop else img.resize((w, h))
                out.save(target)
                log.debug("resized image '%s' saved as '%s'", file, resized)

            return resized, w, h

    except (OSError, UnidentifiedImageError) as ex:
        log.warning("can't resize image '%s': %s", file, ex)
        return None
