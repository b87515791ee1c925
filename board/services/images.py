from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path
from typing import List, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import DuplicateError, NotFoundError, PermissionDeniedError
from ..models.ad import Ad, AdImage
from ..utils.security import tokens_match
from .presenters import image_to_public

logger = logging.getLogger(__name__)


def _extension(filename: str | None) -> str:
    if not filename or "." not in filename:
        return ""
    ext = filename.rsplit(".", 1)[1].lower()
    return ext if ext.isalnum() else ""


def _ad_dir(ad_id: int) -> Path:
    return Path(settings.UPLOAD_DIR) / str(ad_id)


def _owned_ad(db: Session, ad_id: int, edit_token: str | None) -> Ad:
    ad = db.get(Ad, ad_id)
    if not ad:
        raise NotFoundError("Ad", ad_id)
    if not tokens_match(ad.edit_token, edit_token):
        raise PermissionDeniedError("Invalid edit token")
    return ad


def _last_position(db: Session, ad_id: int) -> int | None:
    return db.execute(
        select(func.max(AdImage.position)).where(AdImage.ad_id == ad_id)
    ).scalar_one_or_none()


def save_images(
    db: Session,
    ad_id: int,
    files: Sequence[Tuple[str | None, bytes]],
    edit_token: str | None,
) -> List[dict]:
    """
    Сохраняет файлы (имя, содержимое) на диск и в ad_images.
    Позиции продолжают уже существующие.
    """
    ad = _owned_ad(db, ad_id, edit_token)

    last = _last_position(db, ad.id)
    position = -1 if last is None else last

    folder = _ad_dir(ad.id)
    folder.mkdir(parents=True, exist_ok=True)

    saved: List[AdImage] = []
    written: List[Path] = []
    for original_name, content in files:
        ext = _extension(original_name)
        filename = f"{uuid.uuid4().hex}.{ext}" if ext else uuid.uuid4().hex
        path = folder / filename
        path.write_bytes(content)
        written.append(path)

        position += 1
        img = AdImage(
            ad_id=ad.id,
            url=f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{ad.id}/{filename}",
            position=position,
        )
        db.add(img)
        saved.append(img)

    try:
        db.commit()
    except IntegrityError as exc:
        # параллельная загрузка заняла те же позиции: файлы этого вызова убираем
        db.rollback()
        _discard(written)
        raise DuplicateError(f"Image positions for ad {ad_id} changed concurrently, retry the upload") from exc
    for img in saved:
        db.refresh(img)

    logger.info("Images uploaded ad_id=%s count=%s", ad.id, len(saved))
    return [image_to_public(img) for img in saved]


def delete_image(db: Session, ad_id: int, image_id: int, edit_token: str | None) -> None:
    ad = _owned_ad(db, ad_id, edit_token)
    img = db.get(AdImage, image_id)
    if not img or img.ad_id != ad.id:
        raise NotFoundError("Image", image_id)

    filename = img.url.rsplit("/", 1)[-1]
    db.delete(img)
    db.commit()

    path = _ad_dir(ad.id) / filename
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.exception("Failed to remove image file ad_id=%s image_id=%s", ad.id, image_id)


def _discard(paths: Sequence[Path]) -> None:
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.exception("Failed to remove orphaned image file %s", path)


def remove_ad_files(ad_id: int) -> None:
    # строки уже удалены каскадом, чистим папку по возможности
    folder = _ad_dir(ad_id)
    if not folder.exists():
        return
    try:
        shutil.rmtree(folder)
    except OSError:
        logger.exception("Failed to remove upload dir ad_id=%s", ad_id)
