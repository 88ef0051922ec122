"""initial schema: catalog, seat status and bookings

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-11-22 10:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "cinemas",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
    )
    op.create_index("ix_cinemas_id", "cinemas", ["id"])

    op.create_table(
        "theaters",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("cinema_id", sa.Integer(), sa.ForeignKey("cinemas.id"), nullable=False),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("total_seats", sa.Integer(), nullable=False),
        sa.Column("theater_type", sa.String(50)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
    )
    op.create_index("ix_theaters_id", "theaters", ["id"])
    op.create_index("ix_theaters_cinema_id", "theaters", ["cinema_id"])

    op.create_table(
        "movies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("genres", sa.JSON()),
        sa.Column("language", sa.String(50)),
        sa.Column("subtitle", sa.String(50)),
        sa.Column("poster_url", sa.String(500)),
        sa.Column("release_date", sa.Date()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
    )
    op.create_index("ix_movies_id", "movies", ["id"])

    op.create_table(
        "showtimes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("movie_id", sa.Integer(), sa.ForeignKey("movies.id"), nullable=False),
        sa.Column("theater_id", sa.Integer(), sa.ForeignKey("theaters.id"), nullable=False),
        sa.Column("show_date", sa.Date(), nullable=False),
        sa.Column("show_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("available_seats", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
    )
    op.create_index("ix_showtimes_id", "showtimes", ["id"])
    op.create_index("ix_showtimes_movie_id", "showtimes", ["movie_id"])
    op.create_index("ix_showtimes_theater_id", "showtimes", ["theater_id"])

    op.create_table(
        "seats",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("theater_id", sa.Integer(), sa.ForeignKey("theaters.id"), nullable=False),
        sa.Column("seat_row", sa.String(5), nullable=False),
        sa.Column("seat_number", sa.Integer(), nullable=False),
        sa.Column("seat_type", sa.String(50), nullable=False, server_default="standard"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime()),
        sa.UniqueConstraint("theater_id", "seat_row", "seat_number", name="uq_seat_position"),
    )
    op.create_index("ix_seats_id", "seats", ["id"])
    op.create_index("ix_seats_theater_id", "seats", ["theater_id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("showtime_id", sa.Integer(), sa.ForeignKey("showtimes.id"), nullable=False),
        sa.Column("booking_code", sa.String(40), nullable=False),
        sa.Column("total_amount", sa.Float(), nullable=False),
        sa.Column("booking_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("booking_date", sa.DateTime()),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_showtime_id", "bookings", ["showtime_id"])
    op.create_index("ix_bookings_booking_code", "bookings", ["booking_code"], unique=True)

    op.create_table(
        "booking_seats",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("seat_id", sa.Integer(), sa.ForeignKey("seats.id"), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime()),
    )
    op.create_index("ix_booking_seats_id", "booking_seats", ["id"])
    op.create_index("ix_booking_seats_booking_id", "booking_seats", ["booking_id"])

    op.create_table(
        "seat_status",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("showtime_id", sa.Integer(), sa.ForeignKey("showtimes.id"), nullable=False),
        sa.Column("seat_id", sa.Integer(), sa.ForeignKey("seats.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="reserved"),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id")),
        sa.Column("reserved_until", sa.DateTime()),
        sa.Column("created_at", sa.DateTime()),
        sa.Column("updated_at", sa.DateTime()),
        sa.UniqueConstraint("showtime_id", "seat_id", name="uq_seat_status_showtime_seat"),
    )
    op.create_index("ix_seat_status_id", "seat_status", ["id"])
    op.create_index("ix_seat_status_showtime_id", "seat_status", ["showtime_id"])
    op.create_index("ix_seat_status_booking_id", "seat_status", ["booking_id"])


def downgrade():
    op.drop_table("seat_status")
    op.drop_table("booking_seats")
    op.drop_table("bookings")
    op.drop_table("seats")
    op.drop_table("showtimes")
    op.drop_table("movies")
    op.drop_table("theaters")
    op.drop_table("cinemas")
