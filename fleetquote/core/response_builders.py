from fleetquote.models.parameters import SystemParameters
from fleetquote.models.quotation import Quotation
from fleetquote.models.vehicle import Vehicle
from fleetquote.schemas.parameters import ParametersOut
from fleetquote.schemas.quotation import QuotationOut
from fleetquote.schemas.vehicle import VehicleOut
from fleetquote.services.pricing import calculate_profit


def build_vehicle_response(vehicle: Vehicle) -> VehicleOut:
    return VehicleOut(
        id=vehicle.id,
        tenant_id=vehicle.tenant_id,
        name=vehicle.name,
        make=vehicle.make,
        model=vehicle.model,
        plate=vehicle.plate,
        passenger_capacity=vehicle.passenger_capacity,
        fuel_capacity=vehicle.fuel_capacity,
        fuel_efficiency=vehicle.fuel_efficiency,
        fuel_efficiency_unit=vehicle.fuel_efficiency_unit,
        cost_per_distance=vehicle.cost_per_distance,
        cost_per_day=vehicle.cost_per_day,
        distance_unit=vehicle.distance_unit,
        status=vehicle.status,
        created_at=vehicle.created_at,
        updated_at=vehicle.updated_at,
    )


def build_parameters_response(params: SystemParameters) -> ParametersOut:
    return ParametersOut.model_validate(params, from_attributes=True)


def build_quotation_response(quotation: Quotation) -> QuotationOut:
    return QuotationOut(
        id=quotation.id,
        tenant_id=quotation.tenant_id,
        quotation_number=quotation.quotation_number,
        status=quotation.status,
        vehicle_id=quotation.vehicle_id,
        client_name=quotation.client_name,
        base_location=quotation.base_location,
        origin=quotation.origin,
        destination=quotation.destination,
        total_distance=quotation.total_distance,
        total_time=quotation.total_time,
        costs=quotation.costs,
        total_cost=quotation.total_cost,
        selected_markup=quotation.selected_markup,
        discount_percentage=quotation.discount_percentage,
        sale_price_hnl=quotation.sale_price_hnl,
        sale_price_usd=quotation.sale_price_usd,
        exchange_rate_used=quotation.exchange_rate_used,
        profit=calculate_profit(quotation.total_cost, quotation.sale_price_hnl),
        pricing_options=quotation.pricing_options or [],
        valid_until=quotation.valid_until,
        notes=quotation.notes,
        created_by=quotation.created_by,
        created_at=quotation.created_at,
        updated_at=quotation.updated_at,
    )


def build_vehicle_response_list(vehicles: list) -> list:
    return [build_vehicle_response(vehicle) for vehicle in vehicles]


def build_parameters_response_list(params: list) -> list:
    return [build_parameters_response(p) for p in params]


def build_quotation_response_list(quotations: list) -> list:
    return [build_quotation_response(q) for q in quotations]
