import sys
import json
import re
import secrets
import psycopg2
from fleetquote.core.security import hash_password
from fleetquote.core.config import settings
from fleetquote.services.parameters import default_parameters
from urllib.parse import urlparse


def _connect():
    db_url = urlparse(settings.DATABASE_URL.replace("postgresql+asyncpg://", "postgresql://"))
    return psycopg2.connect(
        host=db_url.hostname or "localhost",
        port=db_url.port or 5432,
        user=db_url.username or "postgres",
        password=db_url.password or "postgres",
        database=db_url.path.lstrip("/") or "postgres"
    )


def _insert_default_parameters(cursor, tenant_id: int) -> int:
    params = default_parameters()
    cursor.execute(
        """
        INSERT INTO system_parameters (
            tenant_id, year, fuel_price, fuel_price_unit, meal_cost_per_day,
            hotel_cost_per_night, driver_incentive_per_day, exchange_rate,
            use_custom_exchange_rate, preferred_distance_unit, preferred_currency,
            rounding_local, rounding_usd, markup_options, recommended_markup,
            toll_fees, pricing_levels, is_active, created_at
        ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, NOW())
        RETURNING id
        """,
        (
            tenant_id, params.year, params.fuel_price, params.fuel_price_unit.name,
            params.meal_cost_per_day, params.hotel_cost_per_night,
            params.driver_incentive_per_day, params.exchange_rate,
            params.use_custom_exchange_rate, params.preferred_distance_unit.name,
            params.preferred_currency, params.rounding_local, params.rounding_usd,
            json.dumps(params.markup_options), params.recommended_markup,
            json.dumps(params.toll_fees),
            json.dumps([level.model_dump() for level in params.pricing_levels]),
            True,
        )
    )
    return cursor.fetchone()[0]


def create_tenant_admin(tenant_name: str, username: str, password: str) -> bool:
    """Onboard a tenant with its first admin user and active default parameters."""
    try:
        conn = _connect()
        cursor = conn.cursor()

        cursor.execute("SELECT id FROM users WHERE username = %s", (username,))
        if cursor.fetchone():
            print(f"Error: User '{username}' already exists")
            cursor.close()
            conn.close()
            return False

        slug = re.sub(r"[^a-z0-9]+", "-", tenant_name.lower()).strip("-") or "tenant"
        cursor.execute(
            "INSERT INTO tenants (name, slug, is_active, created_at) VALUES (%s, %s, TRUE, NOW()) RETURNING id",
            (tenant_name, f"{slug}-{secrets.token_hex(3)}")
        )
        tenant_id = cursor.fetchone()[0]

        cursor.execute(
            "INSERT INTO users (tenant_id, username, password_hash, role, created_at) "
            "VALUES (%s, %s, %s, %s, NOW()) RETURNING id",
            (tenant_id, username, hash_password(password), "ADMIN")
        )
        user_id = cursor.fetchone()[0]

        parameters_id = _insert_default_parameters(cursor, tenant_id)
        conn.commit()

        print(f"Tenant '{tenant_name}' created with ID {tenant_id}")
        print(f"Admin user '{username}' created with ID {user_id}")
        print(f"Default parameters activated with ID {parameters_id}")

        cursor.close()
        conn.close()
        return True

    except Exception as e:
        print(f"Error creating tenant admin: {str(e)}")
        return False


def main():
    if len(sys.argv) < 4:
        print("Usage: python create_admin.py <tenant_name> <username> <password>")
        sys.exit(1)

    tenant_name, username, password = sys.argv[1], sys.argv[2], sys.argv[3]

    if not tenant_name or not username or not password:
        print("Error: tenant name, username and password cannot be empty")
        sys.exit(1)

    success = create_tenant_admin(tenant_name, username, password)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
