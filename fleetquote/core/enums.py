from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    AGENT = "agent"

    def __str__(self):
        return self.value


class DistanceUnit(str, Enum):
    KM = "km"
    MILE = "mile"

    def __str__(self):
        return self.value


class FuelEfficiencyUnit(str, Enum):
    MPG = "mpg"
    MPL = "mpl"
    KPL = "kpl"
    KPG = "kpg"

    def __str__(self):
        return self.value


class FuelPriceUnit(str, Enum):
    GALLON = "gallon"
    LITER = "liter"

    def __str__(self):
        return self.value


class VehicleStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"

    def __str__(self):
        return self.value


class QuotationStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"

    def __str__(self):
        return self.value


class AuditAction(str, Enum):
    CREATE_VEHICLE = "create_vehicle"
    UPDATE_VEHICLE = "update_vehicle"
    DELETE_VEHICLE = "delete_vehicle"
    CREATE_PARAMETERS = "create_parameters"
    UPDATE_PARAMETERS = "update_parameters"
    ACTIVATE_PARAMETERS = "activate_parameters"
    CREATE_QUOTATION = "create_quotation"
    UPDATE_QUOTATION = "update_quotation"
    DELETE_QUOTATION = "delete_quotation"
    RECALCULATE_QUOTATION = "recalculate_quotation"
    REGISTER = "register"
    LOGIN = "login"

    def __str__(self):
        return self.value
