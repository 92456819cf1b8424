"""
AircraftMetadata model - static reference data for registration lookups.

Mirrors the OpenSky aircraft database columns. Rows are bulk-loaded from the
CSV dump by an import job and are relatively static.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from skytrack.models.base import Base


class AircraftMetadata(Base):
    """
    Static aircraft information, one row per airframe.

    Lookups are exact-match on registration (tail number). The ICAO24
    address is stored but not unique: re-registered airframes can appear
    more than once in the upstream dump.
    """

    __tablename__ = 'aircraft_metadata'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    icao24: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
        comment='ICAO24 hex transponder address'
    )

    registration: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        index=True,
        comment='Aircraft registration (tail number)'
    )

    # Manufacturer / type
    manufacturer_icao: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    manufacturer_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, index=True)
    type_code: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment='ICAO type designator (e.g., B738)'
    )
    serial_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    line_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    icao_aircraft_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Operator / owner
    operator: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    operator_callsign: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    operator_icao: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    operator_iata: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    owner: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Registration status
    test_reg: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    registered: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    reg_until: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    built: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    first_flight_date: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    seat_configuration: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    engines: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Equipage
    modes: Mapped[bool] = mapped_column(Boolean, default=False)
    adsb: Mapped[bool] = mapped_column(Boolean, default=False)
    acars: Mapped[bool] = mapped_column(Boolean, default=False)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category_description: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        comment='Record creation timestamp'
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        comment='Last update timestamp'
    )

    def __repr__(self) -> str:
        return f'<AircraftMetadata {self.registration or "?"} {self.icao24 or "?"} {self.model or "?"}>'

    @property
    def display_model(self) -> Optional[str]:
        """Return best available model identifier."""
        return self.model or self.type_code

    @property
    def display_manufacturer(self) -> Optional[str]:
        """Return best available manufacturer identifier."""
        return self.manufacturer_name or self.manufacturer_icao
