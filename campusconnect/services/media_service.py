from collections import namedtuple
from pathlib import Path
from uuid import uuid4

from flask import current_app
from PIL import Image, ImageOps
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from campusconnect.errors import BadRequestError

RESOURCE_EXTENSIONS = {"pdf", "doc", "docx", "ppt", "pptx", "txt", "jpg", "jpeg", "png"}
PROFILE_PICTURE_EXTENSIONS = {"jpg", "jpeg", "png", "gif"}
PROFILE_PICTURE_SIZE = (300, 300)

StoredFile = namedtuple("StoredFile", ["url", "public_id", "file_name", "file_size", "file_type"])


class MediaService:
    RESOURCES = "resources"
    PROFILE_PICTURES = "profile-pictures"

    @staticmethod
    def _extension(filename):
        return filename.rsplit(".", 1)[1].lower() if "." in filename else ""

    @staticmethod
    def _size_of(storage):
        stream = storage.stream
        stream.seek(0, 2)
        size = stream.tell()
        stream.seek(0)
        return size

    @staticmethod
    def _upload_root():
        return Path(current_app.config["UPLOAD_DIR"])

    @classmethod
    def _new_public_id(cls, kind):
        return f"{current_app.config['MEDIA_FOLDER']}/{kind}/{uuid4().hex}"

    @staticmethod
    def _url_for(public_id, extension):
        base = current_app.config["MEDIA_BASE_URL"].rstrip("/")
        return f"{base}/{public_id}.{extension}"

    @classmethod
    def _validate(cls, storage, allowed, max_mb, label):
        if not storage or not storage.filename:
            raise BadRequestError(f"Please provide {label}.")
        filename = secure_filename(storage.filename)
        extension = cls._extension(filename)
        if not filename or extension not in allowed:
            raise BadRequestError("File type not supported.")
        size = cls._size_of(storage)
        if size > max_mb * 1024 * 1024:
            raise BadRequestError(f"File size too large. Maximum size is {max_mb}MB")
        return filename, extension, size

    @classmethod
    def save_resource(cls, storage: FileStorage):
        original_name = storage.filename if storage else None
        filename, extension, size = cls._validate(
            storage,
            RESOURCE_EXTENSIONS,
            current_app.config["MAX_RESOURCE_MB"],
            "a file",
        )
        public_id = cls._new_public_id(cls.RESOURCES)
        absolute_path = cls._upload_root() / f"{public_id}.{extension}"
        absolute_path.parent.mkdir(parents=True, exist_ok=True)
        storage.save(absolute_path)
        return StoredFile(
            url=cls._url_for(public_id, extension),
            public_id=public_id,
            file_name=original_name or filename,
            file_size=size,
            file_type=storage.mimetype or "application/octet-stream",
        )

    @classmethod
    def save_profile_picture(cls, storage: FileStorage):
        filename, extension, size = cls._validate(
            storage,
            PROFILE_PICTURE_EXTENSIONS,
            current_app.config["MAX_PROFILE_PICTURE_MB"],
            "an image",
        )

        # Verify actual image bytes to avoid extension spoofing.
        try:
            Image.open(storage.stream).verify()
            storage.stream.seek(0)
            image = Image.open(storage.stream)
            image_format = image.format
            image = ImageOps.fit(image, PROFILE_PICTURE_SIZE)
        except Exception as exc:
            raise BadRequestError("Please upload an image file") from exc

        if image_format == "JPEG" and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")

        public_id = cls._new_public_id(cls.PROFILE_PICTURES)
        absolute_path = cls._upload_root() / f"{public_id}.{extension}"
        absolute_path.parent.mkdir(parents=True, exist_ok=True)
        image.save(absolute_path, format=image_format)
        return StoredFile(
            url=cls._url_for(public_id, extension),
            public_id=public_id,
            file_name=filename,
            file_size=absolute_path.stat().st_size,
            file_type=Image.MIME.get(image_format, storage.mimetype),
        )

    @staticmethod
    def extract_public_id(url):
        """Derive the store identifier from a media URL.

        The identifier is the path from the media folder segment onwards,
        without the file extension.
        """
        if not url:
            return None
        parts = url.split("/")
        stem = parts[-1].rsplit(".", 1)[0]
        folder = current_app.config["MEDIA_FOLDER"]
        if folder in parts[:-1]:
            folder_index = parts.index(folder)
            return "/".join(parts[folder_index:-1] + [stem])
        return stem

    @classmethod
    def delete(cls, public_id):
        folder = current_app.config["MEDIA_FOLDER"]
        if not public_id or not public_id.startswith(f"{folder}/"):
            return False
        root = cls._upload_root().resolve()
        target = (root / public_id).resolve()
        if root not in target.parents:
            return False
        removed = False
        for candidate in target.parent.glob(f"{target.name}.*"):
            candidate.unlink()
            removed = True
        return removed
