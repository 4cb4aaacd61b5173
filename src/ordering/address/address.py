"""Delivery addresses and the address book checkout resolves them through."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Float, Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.errors import AddressNotFound, AddressRequired


@ordering.aggregate
class Address:
    """A shopper's saved delivery address. Orders copy it, never reference it."""

    shopper_id = Identifier(required=True)
    full_name = String(required=True, max_length=255)
    phone = String(required=True, max_length=30)
    street = String(required=True, max_length=255)
    building = String(max_length=50)
    floor = String(max_length=20)
    apartment = String(max_length=20)
    city = String(required=True, max_length=100)
    governorate = String(required=True, max_length=100)
    latitude = Float(min_value=-90.0, max_value=90.0)
    longitude = Float(min_value=-180.0, max_value=180.0)
    is_default = Boolean(default=False)

    def unset_default(self) -> None:
        self.is_default = False


@dataclass(frozen=True)
class NewAddress:
    full_name: str
    phone: str
    street: str
    city: str
    governorate: str
    building: str | None = None
    floor: str | None = None
    apartment: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    is_default: bool = False


@ordering.repository(part_of=Address)
class AddressRepository:
    def for_shopper(self, shopper_id: str) -> list[Address]:
        return self._dao.query.filter(shopper_id=shopper_id).all().items


@dataclass
class ResolvedAddress:
    """The address to ship to, plus any unsaved changes it implies."""

    address: Address
    pending: list[Address]


class AddressBook:
    def resolve(
        self,
        shopper_id: str,
        address_id: str | None = None,
        new_address: NewAddress | None = None,
    ) -> ResolvedAddress:
        """Find the shopper's address or prepare a new one.

        Nothing is saved here. New addresses, and the siblings that lose
        their default flag, are returned in ``pending`` for the caller to
        persist with the order.
        """
        repo = current_domain.repository_for(Address)

        if address_id:
            try:
                address = repo.get(address_id)
            except ObjectNotFoundError as exc:
                raise AddressNotFound(address_id) from exc
            if str(address.shopper_id) != str(shopper_id):
                raise AddressNotFound(address_id)
            return ResolvedAddress(address=address, pending=[])

        if new_address is None:
            raise AddressRequired()

        address = Address(
            shopper_id=shopper_id,
            full_name=new_address.full_name,
            phone=new_address.phone,
            street=new_address.street,
            building=new_address.building,
            floor=new_address.floor,
            apartment=new_address.apartment,
            city=new_address.city,
            governorate=new_address.governorate,
            latitude=new_address.latitude,
            longitude=new_address.longitude,
            is_default=new_address.is_default,
        )
        if (new_address.latitude is None) != (new_address.longitude is None):
            raise ValidationError({"coordinates": ["Both latitude and longitude are required"]})

        pending = [address]
        if address.is_default:
            for other in repo.for_shopper(shopper_id):
                if other.is_default:
                    other.unset_default()
                    pending.append(other)

        return ResolvedAddress(address=address, pending=pending)
