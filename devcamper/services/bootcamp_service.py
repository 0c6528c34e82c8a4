"""
DevCamper Backend — Bootcamp Service (Resource Handler)
=========================================================

What:  Business logic for the bootcamp resource: list, get, create, update,
       delete, radius search and photo upload.
How:   Composes the listing query builder, the geocoder, the file service
       and the ownership policy around one AsyncSession per call.
Who:   Called by routes/bootcamps.py.

Mutation Strategy:
    Update, delete and the photo update are single conditional statements:

        UPDATE bootcamps SET ... WHERE id = :id AND <mutable_by(user)> RETURNING *

    so authorization and mutation happen in one round trip and a concurrent
    owner change cannot slip between a check and a write. When no row comes
    back, one follow-up SELECT decides between 404 (no such id) and 403
    (exists, not yours).

Error Handling Strategy:
    Domain failures raise DevCamperError subclasses. SQLAlchemy errors are
    wrapped in DatabaseError, except unique violations which are the client's
    doing and become ValidationError.
"""

import logging
import uuid
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.exceptions import (
    DatabaseError,
    DevCamperError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from devcamper.geo import angular_radius, bounding_box, within_cap
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.user import User
from devcamper.policies import can_mutate, is_admin, mutable_by
from devcamper.schemas.bootcamp import (
    BootcampCreate,
    BootcampEnvelope,
    BootcampListEnvelope,
    BootcampRadiusEnvelope,
    BootcampResponse,
    BootcampUpdate,
    EmptyEnvelope,
    PhotoEnvelope,
)
from devcamper.services.advanced_results import advanced_results
from devcamper.services.file_service import file_service
from devcamper.services.geocoder import geocoder_service

logger = logging.getLogger(__name__)

# API field name → column, for filters and sort keys on the list endpoint
LIST_ALIASES = {"user": "user_id"}


def slugify(value: str) -> str:
    """'Devworks Bootcamp!' → 'devworks-bootcamp'."""
    raw = "".join(ch.lower() if ch.isalnum() else "-" for ch in value.strip())
    return "-".join(part for part in raw.split("-") if part)[:60]


def parse_bootcamp_id(raw: Any) -> uuid.UUID:
    """
    Ids that are not UUIDs cannot exist, so they are reported as not found
    rather than as malformed input.
    """
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise NotFoundError(resource="Bootcamp", resource_id=str(raw))


def _serialize(bootcamp: Bootcamp) -> Dict[str, Any]:
    return BootcampResponse.from_model(bootcamp).model_dump(mode="json")


class BootcampService:
    """
    Request-scoped operations on bootcamps.

    Stateless: every method receives the session and (where needed) the
    authenticated user, so instances can be shared freely.
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_bootcamps(
        self,
        db: AsyncSession,
        params: Mapping[str, str],
    ) -> BootcampListEnvelope:
        """GET /bootcamps: the listing envelope, passed through unchanged."""
        envelope = await advanced_results(
            db,
            Bootcamp,
            params,
            serialize=_serialize,
            aliases=LIST_ALIASES,
        )
        return BootcampListEnvelope(**envelope)

    async def get_bootcamp(self, db: AsyncSession, bootcamp_id: Any) -> BootcampEnvelope:
        """
        Raises:
            NotFoundError: `Bootcamp not found with id of <id>` (→ 404)
        """
        bootcamp = await self._get_or_404(db, parse_bootcamp_id(bootcamp_id))
        return BootcampEnvelope(data=BootcampResponse.from_model(bootcamp))

    async def bootcamps_in_radius(
        self,
        db: AsyncSession,
        zipcode: str,
        distance: float,
    ) -> BootcampRadiusEnvelope:
        """
        Bootcamps within `distance` km of the first geocoding candidate for
        `zipcode`.

        Steps:
            1. geocode the zipcode, keep candidate 0
            2. angular radius = distance / 6378
            3. bounding-box prefilter in SQL, exact cap test in Python

        Raises:
            GeocodingError: provider failed (→ 503)
            NotFoundError:  provider knows no such zipcode (→ 404)
        """
        candidates = await geocoder_service.geocode(zipcode)
        if not candidates:
            raise NotFoundError(
                resource="Location",
                message=f"No location found for zipcode {zipcode}",
                context={"zipcode": zipcode},
            )
        lat, lng = candidates[0].latitude, candidates[0].longitude

        radius = angular_radius(distance)
        min_lat, max_lat, min_lng, max_lng = bounding_box(lat, lng, radius)

        try:
            result = await db.execute(
                select(Bootcamp).where(
                    Bootcamp.latitude.is_not(None),
                    Bootcamp.longitude.is_not(None),
                    Bootcamp.latitude.between(min_lat, max_lat),
                    Bootcamp.longitude.between(min_lng, max_lng),
                )
            )
            candidates_in_box = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error in radius search: %s", str(e), exc_info=True)
            raise DatabaseError(context={"zipcode": zipcode, "distance": distance})

        matches = [
            BootcampResponse.from_model(b)
            for b in candidates_in_box
            if within_cap(lat, lng, b.latitude, b.longitude, radius)
        ]
        logger.info(
            "Radius search %s/%skm: %d in box, %d in radius",
            zipcode,
            distance,
            len(candidates_in_box),
            len(matches),
        )
        return BootcampRadiusEnvelope(count=len(matches), data=matches)

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_bootcamp(
        self,
        db: AsyncSession,
        payload: BootcampCreate,
        user: User,
    ) -> BootcampEnvelope:
        """
        Create a bootcamp owned by `user`.

        Raises:
            ValidationError: user already owns one and is not an admin, or the
                             name is taken, or the address cannot be geocoded
        """
        try:
            existing = await db.execute(
                select(Bootcamp.id).where(Bootcamp.user_id == user.id).limit(1)
            )
            already_published = existing.scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            logger.error("Database error checking bootcamps of %s: %s", user.id, str(e))
            raise DatabaseError(context={"user_id": str(user.id)})

        if already_published and not is_admin(user):
            raise ValidationError(
                message=f"The user with the id {user.id} cannot publish more than one bootcamp",
                context={"user_id": str(user.id)},
            )

        values = payload.model_dump(exclude={"address"})
        values.update(await self._locate(payload.address))

        bootcamp = Bootcamp(**values, slug=slugify(payload.name), user_id=user.id)
        db.add(bootcamp)
        await self._flush(db, bootcamp_id=None)

        logger.info("Bootcamp %s created by user %s", bootcamp.id, user.id)
        return BootcampEnvelope(data=BootcampResponse.from_model(bootcamp))

    async def update_bootcamp(
        self,
        db: AsyncSession,
        bootcamp_id: Any,
        payload: BootcampUpdate,
        user: User,
    ) -> BootcampEnvelope:
        """
        Apply the fields the client sent, if `user` owns the bootcamp or is
        an admin.

        Raises:
            NotFoundError:   no such bootcamp (→ 404)
            ForbiddenError:  not owner and not admin (→ 403)
            ValidationError: duplicate name or ungeocodable address (→ 400)
        """
        bid = parse_bootcamp_id(bootcamp_id)
        values = payload.model_dump(exclude_unset=True)

        address = values.pop("address", None)
        if "name" in values:
            values["slug"] = slugify(values["name"])

        if address is not None or not values:
            # 404/403 come before geocoding, and before reporting a no-op
            bootcamp = await self._get_or_404(db, bid)
            if not can_mutate(user, bootcamp):
                raise self._forbidden(user, "update")
        if address is not None:
            values.update(await self._locate(address))

        if values:
            bootcamp = await self._conditional_update(db, bid, user, values, action="update")

        logger.info("Bootcamp %s updated by user %s: %s", bid, user.id, sorted(values))
        return BootcampEnvelope(data=BootcampResponse.from_model(bootcamp))

    async def delete_bootcamp(
        self,
        db: AsyncSession,
        bootcamp_id: Any,
        user: User,
    ) -> EmptyEnvelope:
        """
        Permanently delete the bootcamp. Deleting it again reports 404.

        Raises:
            NotFoundError:  no such bootcamp (→ 404)
            ForbiddenError: not owner and not admin (→ 403)
        """
        bid = parse_bootcamp_id(bootcamp_id)
        try:
            result = await db.execute(
                delete(Bootcamp)
                .where(Bootcamp.id == bid, mutable_by(user))
                .returning(Bootcamp.id)
            )
            deleted = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error deleting bootcamp %s: %s", bid, str(e), exc_info=True)
            raise DatabaseError(context={"bootcamp_id": str(bid)})

        if deleted is None:
            await self._raise_unmatched(db, bid, user, action="delete")

        logger.info("Bootcamp %s deleted by user %s", bid, user.id)
        return EmptyEnvelope()

    async def upload_photo(
        self,
        db: AsyncSession,
        bootcamp_id: Any,
        user: User,
        filename: Optional[str],
        content_type: Optional[str],
        content: Optional[bytes],
    ) -> PhotoEnvelope:
        """
        Store a bootcamp photo as photo_<id><ext> and record it.

        Check order: bootcamp exists → caller may change it → a file was sent
        → it is an image → it is within the size limit.

        Raises:
            NotFoundError (404), ForbiddenError (403), ValidationError (400),
            FileTooLargeError (413), FileStorageError (500)
        """
        bid = parse_bootcamp_id(bootcamp_id)
        bootcamp = await self._get_or_404(db, bid)
        if not can_mutate(user, bootcamp):
            raise self._forbidden(user, "upload a photo for")

        file_service.validate_upload(content, content_type)

        previous_photo = bootcamp.photo
        photo_name = file_service.photo_filename(bid, filename)
        await file_service.store_file(content, photo_name)

        try:
            await self._conditional_update(
                db, bid, user, {"photo": photo_name}, action="upload a photo for"
            )
        except DevCamperError:
            # Same name means the stored file is still the recorded one
            if photo_name != previous_photo:
                await file_service.cleanup_file(photo_name)
            raise

        if previous_photo != photo_name:
            await file_service.cleanup_file(previous_photo)

        logger.info("Bootcamp %s photo set to %s by user %s", bid, photo_name, user.id)
        return PhotoEnvelope(data=photo_name)

    # ── Internals ─────────────────────────────────────────────────────────

    async def _get_or_404(self, db: AsyncSession, bid: uuid.UUID) -> Bootcamp:
        try:
            result = await db.execute(select(Bootcamp).where(Bootcamp.id == bid))
            bootcamp = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching bootcamp %s: %s", bid, str(e))
            raise DatabaseError(
                message="Could not retrieve the bootcamp. Please try again.",
                context={"bootcamp_id": str(bid)},
            )
        if bootcamp is None:
            raise NotFoundError(resource="Bootcamp", resource_id=str(bid))
        return bootcamp

    async def _conditional_update(
        self,
        db: AsyncSession,
        bid: uuid.UUID,
        user: User,
        values: Dict[str, Any],
        action: str,
    ) -> Bootcamp:
        try:
            result = await db.execute(
                update(Bootcamp)
                .where(Bootcamp.id == bid, mutable_by(user))
                .values(**values)
                .returning(Bootcamp)
            )
            bootcamp = result.scalar_one_or_none()
        except IntegrityError as e:
            logger.warning("Unique violation updating bootcamp %s: %s", bid, str(e.orig))
            raise ValidationError(message="Duplicate field value entered")
        except SQLAlchemyError as e:
            logger.error("Database error updating bootcamp %s: %s", bid, str(e), exc_info=True)
            raise DatabaseError(context={"bootcamp_id": str(bid)})

        if bootcamp is None:
            await self._raise_unmatched(db, bid, user, action)
        return bootcamp

    async def _raise_unmatched(
        self,
        db: AsyncSession,
        bid: uuid.UUID,
        user: User,
        action: str,
    ) -> None:
        """A conditional write matched nothing: say whether it was 404 or 403."""
        try:
            result = await db.execute(select(Bootcamp.id).where(Bootcamp.id == bid))
            exists = result.scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            logger.error("Database error probing bootcamp %s: %s", bid, str(e))
            raise DatabaseError(context={"bootcamp_id": str(bid)})
        if not exists:
            raise NotFoundError(resource="Bootcamp", resource_id=str(bid))
        raise self._forbidden(user, action)

    @staticmethod
    def _forbidden(user: User, action: str) -> ForbiddenError:
        return ForbiddenError(
            message=f"User {user.id} is not authorized to {action} this bootcamp",
            context={"user_id": str(user.id), "role": user.role},
        )

    async def _flush(self, db: AsyncSession, bootcamp_id: Optional[uuid.UUID]) -> None:
        try:
            await db.flush()
        except IntegrityError as e:
            logger.warning("Unique violation writing bootcamp %s: %s", bootcamp_id, str(e.orig))
            raise ValidationError(message="Duplicate field value entered")
        except SQLAlchemyError as e:
            logger.error("Database error writing bootcamp: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="An error occurred while saving the bootcamp. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def _locate(self, address: str) -> Dict[str, Any]:
        """Location columns from the first geocoding candidate of `address`."""
        candidates = await geocoder_service.geocode(address)
        if not candidates:
            raise ValidationError(
                message=f"Could not find a location for address '{address}'",
                field="address",
            )
        first = candidates[0]
        return {
            "latitude": first.latitude,
            "longitude": first.longitude,
            "formatted_address": first.formatted_address,
            "street": first.street,
            "city": first.city,
            "state": first.state,
            "zipcode": first.zipcode,
            "country": first.country,
        }


bootcamp_service = BootcampService()
