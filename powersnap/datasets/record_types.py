from __future__ import annotations

from typing import Any

# Declaration order matters: it is the last tie-break of header classification.
# Scenario-aware study results first, equipment after that in alphabetical order.


def _key(name: str, category: str = "Identity") -> dict[str, Any]:
    return {"name": name, "category": category, "key": True}


def _scenario(name: str = "Scenario") -> dict[str, Any]:
    return {"name": name, "category": "Identity", "key": True, "scenario": True}


def _p(name: str, category: str = "General", units: str | None = None, deprecated: bool = False) -> dict[str, Any]:
    prop: dict[str, Any] = {"name": name, "category": category}
    if units:
        prop["units"] = units
    if deprecated:
        prop["deprecated"] = True
    return prop


def _common(*extra: dict[str, Any]) -> list[dict[str, Any]]:
    return [
        _key("Id"),
        _p("Status", "Identity"),
        _p("NoOfPhases", "Electrical"),
        *extra,
        _p("DataStatus", "Metadata"),
        _p("Comment", "Metadata"),
    ]


def _type(
    name: str,
    source_class: str,
    properties: list[dict[str, Any]],
    display_name: str | None = None,
    category: str = "equipment",
) -> dict[str, Any]:
    return {
        "name": name,
        "display_name": display_name or name,
        "source_class": source_class,
        "category": category,
        "properties": properties,
    }


RECORD_TYPE_DEFINITIONS: tuple[dict[str, Any], ...] = (
    _type(
        "ArcFlash",
        "Arc Flash Scenario Report",
        [
            _key("ArcFaultBusName"),
            _p("WorstCase", "Study Results"),
            _scenario(),
            _p("ArcFaultBusKV", "Electrical", "kV"),
            _p("UpstreamTripDeviceName", "Protection"),
            _p("UpstreamTripDeviceFunction", "Protection"),
            _p("EquipmentType", "Physical"),
            _p("ElectrodeConfiguration"),
            _p("ElectrodeGapMM", units="mm"),
            _p("BusBoltedFaultKA", "Electrical", "kA"),
            _p("BusArcFaultKA", "Electrical", "kA"),
            _p("TripTime", "Protection", "s"),
            _p("OpeningTime", units="s"),
            _p("ArcTime", units="s"),
            _p("ArcFlashBoundary", "Study Results", "in"),
            _p("WorkingDistance", units="in"),
            _p("IncidentEnergy", "Study Results", "cal/cm2"),
            _p("Comments", "Metadata"),
            _p("Id", "Metadata", deprecated=True),
        ],
        display_name="Arc Flash",
        category="calculation",
    ),
    _type(
        "ShortCircuit",
        "Equipment Duty Scenario Report",
        [
            _key("BusName"),
            _key("EquipmentName"),
            _p("WorstCase", "Study Results"),
            _scenario(),
            _p("FaultType", "Electrical"),
            _p("Vpu", units="pu"),
            _p("BusBaseKV", "Electrical", "kV"),
            _p("BusNoOfPhases", "Electrical"),
            _p("EquipmentManufacturer", "Physical"),
            _p("EquipmentStyle", "Physical"),
            _p("TestStandard", "Physical"),
            _p("HalfCycleRatingKA", "Protection", "kA"),
            _p("HalfCycleDutyKA", "Electrical", "kA"),
            _p("HalfCycleDutyPercent", "Electrical", "%"),
            _p("Comments", "Metadata"),
            _p("Id", "Metadata", deprecated=True),
        ],
        display_name="Short Circuit",
        category="calculation",
    ),
    _type(
        "AFD",
        "AFDs",
        _common(
            _p("InputBus", "Identity"),
            _p("OutputBus", "Identity"),
            _p("InputFrequency", units="Hz"),
            _p("OutputFrequency", units="Hz"),
            _p("Rating", "Physical"),
            _p("HPkVA", "Electrical"),
            _p("XR"),
            _p("Efficiency", units="%"),
        ),
        display_name="Adjustable Frequency Drive",
    ),
    _type(
        "ATS",
        "ATSs",
        _common(
            _p("BaseKV", "Electrical", "kV"),
            _p("Service"),
            _p("Area", "Location"),
            _p("Zone", "Location"),
            _p("Type", "Physical"),
            _p("ContCurrentA", "Electrical", "A"),
            _p("ForcedToEnergy", units="cal/cm2"),
        ),
        display_name="Automatic Transfer Switch",
    ),
    _type(
        "Battery",
        "Batteries",
        _common(
            _p("ToBusId", "Identity"),
            _p("BaseKV", "Electrical", "kV"),
            _p("TotalRatedKV", "Electrical", "kV"),
            _p("RatedAmps", "Electrical", "A"),
            _p("FailureRate", "Reliability", "/year"),
        ),
    ),
    _type(
        "Bus",
        "Buses",
        [
            _key("Id"),
            _p("AcDc"),
            _p("Status", "Identity"),
            _p("BaseKV", "Electrical", "kV"),
            _p("NoOfPhases", "Electrical"),
            _p("Service"),
            _p("Area", "Location"),
            _p("Zone", "Location"),
            _p("Manufacturer", "Physical"),
            _p("Type", "Physical"),
            _p("BusRatingA", "Physical", "A"),
            _p("BusBracingKA", "Physical", "kA"),
            _p("TestStandard", "Protection"),
            _p("Material"),
            _p("Mounting"),
            _p("DataStatus", "Metadata"),
            _p("Comment", "Metadata"),
        ],
    ),
    _type(
        "Busway",
        "Busways",
        _common(
            _p("FromBusId", "Identity"),
            _p("ToBusId", "Identity"),
            _p("FromBaseKV", "Electrical", "kV"),
            _p("ToBaseKV", "Electrical", "kV"),
            _p("Manufacturer", "Physical"),
            _p("Length", units="ft"),
            _p("RatingA", "Electrical", "A"),
        ),
    ),
    _type(
        "Cable",
        "Cables",
        _common(
            _p("AcDc"),
            _p("FromBusId", "Identity"),
            _p("ToBusId", "Identity"),
            _p("FromBaseKV", "Electrical", "kV"),
            _p("ToBaseKV", "Electrical", "kV"),
            _p("Type", "Physical"),
            _p("Size", "Physical"),
            _p("Length", units="ft"),
            _p("NoPerPhase", "Physical"),
            _p("Material", "Physical"),
            _p("RatingA", "Electrical", "A"),
        ),
    ),
    _type(
        "Capacitor",
        "Capacitors",
        _common(
            _p("ToBusId", "Identity"),
            _p("BaseKV", "Electrical", "kV"),
            _p("NomKV", "Electrical", "kV"),
            _p("MVAR", "Electrical", "MVAR"),
        ),
    ),
    _type(
        "CLReactor",
        "CL Reactors",
        _common(
            _p("FromBusId", "Identity"),
            _p("ToBusId", "Identity"),
            _p("BaseKV", "Electrical", "kV"),
            _p("RatingA", "Electrical", "A"),
            _p("ImpedanceOhms", "Electrical"),
        ),
        display_name="Current Limiting Reactor",
    ),
    _type(
        "CT",
        "CTs",
        _common(
            _p("ItemConnection"),
            _p("BusConnection", "Identity"),
            _p("CTFunction"),
            _p("FullCTRatio"),
            _p("SetCTRatio"),
        ),
        display_name="Current Transformer",
    ),
    _type(
        "Filter",
        "Filters",
        _common(
            _p("ToBusId", "Identity"),
            _p("BaseKV", "Electrical", "kV"),
            _p("Type", "Physical"),
            _p("C1MVAR", units="MVAR"),
            _p("C1KV", "Electrical", "kV"),
        ),
    ),
    _type(
        "Fuse",
        "Fuses",
        [
            _key("Id"),
            _p("AcDc"),
            _p("Status", "Identity"),
            _p("NoOfPhases", "Electrical"),
            _key("OnBus"),
            _p("BaseKV", "Electrical", "kV"),
            _p("ConnType", "Physical"),
            _p("Standard"),
            _p("NormalState"),
            _p("FuseMfr", "Physical"),
            _p("FuseType", "Physical"),
            _p("FuseStyle", "Physical"),
            _p("Model", "Physical"),
            _p("Size", "Physical"),
            _p("SCIntKA", "Electrical", "kA"),
            _p("DataStatus", "Metadata"),
            _p("Comment", "Metadata"),
        ],
    ),
    _type(
        "Generator",
        "Generators",
        _common(
            _p("ToBusId", "Identity"),
            _p("BaseKV", "Electrical", "kV"),
            _p("GenKV", "Electrical", "kV"),
            _p("Rating", "Physical"),
            _p("RatingUnit", "Physical"),
            _p("Type", "Physical"),
            _p("PowerFactor"),
        ),
    ),
    _type(
        "HVBreaker",
        "HV Breakers",
        [
            _key("Id"),
            _p("Status", "Identity"),
            _p("NoOfPhases", "Electrical"),
            _key("OnBus"),
            _p("BaseKV", "Electrical", "kV"),
            _p("Manufacturer", "Physical"),
            _p("Type", "Physical"),
            _p("Style", "Physical"),
            _p("ContCurrentA", "Electrical", "A"),
            _p("SCTestStd", "Electrical"),
            _p("MaxKV", "Electrical", "kV"),
            _p("DataStatus", "Metadata"),
            _p("Comment", "Metadata"),
        ],
        display_name="HV Breaker",
    ),
    _type(
        "Inverter",
        "Inverters",
        _common(
            _p("InputBusId", "Identity"),
            _p("OutputBusId", "Identity"),
            _p("RatingKVA", "Electrical", "kVA"),
            _p("Efficiency", units="%"),
        ),
    ),
    _type(
        "Load",
        "Loads",
        _common(
            _p("ToBusId", "Identity"),
            _p("ToBaseKV", "Electrical", "kV"),
            _p("LoadModel", "Physical"),
            _p("LoadClass", "Demand"),
            _p("DemandFactor", "Demand"),
            _p("ConstMVAMW", "Electrical", "MW"),
        ),
    ),
    _type(
        "LVBreaker",
        "LV Breakers",
        [
            _key("Id"),
            _p("AcDc"),
            _p("Status", "Identity"),
            _p("NoOfPhases", "Electrical"),
            _key("OnBus"),
            _p("BaseKV", "Electrical", "kV"),
            _p("BreakerMfr", "Physical"),
            _p("BreakerType", "Physical"),
            _p("FrameA", "Physical", "A"),
            _p("TripMfr", "Protection"),
            _p("TripType", "Protection"),
            _p("TripA", "Protection", "A"),
            _p("SCIntKA", "Electrical", "kA"),
            _p("DataStatus", "Metadata"),
            _p("Comment", "Metadata"),
        ],
        display_name="LV Breaker",
    ),
    _type(
        "MCC",
        "MCCs",
        _common(
            _p("BaseKV", "Electrical", "kV"),
            _p("Manufacturer", "Physical"),
            _p("BusRatingA", "Physical", "A"),
            _p("BusBracingKA", "Physical", "kA"),
        ),
        display_name="Motor Control Center",
    ),
    _type(
        "Meter",
        "Meters",
        _common(
            _p("BusConnection", "Identity"),
            _p("MeterType", "Physical"),
            _p("PTRatio"),
            _p("CTRatio"),
        ),
    ),
    _type(
        "Motor",
        "Motors",
        _common(
            _p("ToBusId", "Identity"),
            _p("BaseKV", "Electrical", "kV"),
            _p("MotorKV", "Electrical", "kV"),
            _p("HPorKW", "Electrical"),
            _p("Type", "Physical"),
            _p("LoadClass", "Demand"),
        ),
    ),
    _type(
        "Panel",
        "Panels",
        _common(
            _p("BaseKV", "Electrical", "kV"),
            _p("Area", "Location"),
            _p("Zone", "Location"),
            _p("Manufacturer", "Physical"),
            _p("Type", "Physical"),
            _p("FedBy"),
            _p("MainBusRatingA", "Physical", "A"),
        ),
    ),
    _type(
        "Photovoltaic",
        "Photovoltaics",
        _common(
            _p("ToBusId", "Identity"),
            _p("RatingKW", "Electrical", "kW"),
            _p("ArrayCount", "Physical"),
        ),
    ),
    _type(
        "POC",
        "POCs",
        _common(
            _p("BaseKV", "Electrical", "kV"),
            _p("Service"),
            _p("BusRatingA", "Physical", "A"),
            _p("BusBracingKA", "Physical", "kA"),
            _p("PowerType", "Physical"),
        ),
        display_name="Point of Connection",
    ),
    _type(
        "Rectifier",
        "Rectifiers",
        _common(
            _p("InputBus", "Identity"),
            _p("OutputBus", "Identity"),
            _p("DCRatedKV", "Electrical", "kV"),
            _p("Type", "Physical"),
        ),
    ),
    _type(
        "Relay",
        "Relays",
        _common(
            _p("Manufacturer", "Physical"),
            _p("Type", "Physical"),
            _p("DeviceFunction"),
            _p("CTBusId", "Identity"),
            _p("CTRatio"),
        ),
    ),
    _type(
        "Shunt",
        "Shunts",
        _common(
            _p("ToBusId", "Identity"),
            _p("BaseKV", "Electrical", "kV"),
            _p("MVAR", "Electrical", "MVAR"),
        ),
    ),
    _type(
        "Switch",
        "Switches",
        [
            _key("Id"),
            _p("Status", "Identity"),
            _p("NoOfPhases", "Electrical"),
            _key("OnBus"),
            _p("BaseKV", "Electrical", "kV"),
            _p("NormalState"),
            _p("Manufacturer", "Physical"),
            _p("Type", "Physical"),
            _p("ContCurrentA", "Electrical", "A"),
            _p("SCMomKA", "Electrical", "kA"),
            _p("DataStatus", "Metadata"),
            _p("Comment", "Metadata"),
        ],
    ),
    _type(
        "Transformer2W",
        "2W Transformers",
        _common(
            _p("FromBusId", "Identity"),
            _p("ToBusId", "Identity"),
            _p("FromBaseKV", "Electrical", "kV"),
            _p("ToBaseKV", "Electrical", "kV"),
            _p("FromConn"),
            _p("ToConn"),
            _p("MVA", "Electrical", "MVA"),
            _p("ZPercent", "Electrical", "%"),
        ),
        display_name="2-Winding Transformer",
    ),
    _type(
        "Transformer3W",
        "3W Transformers",
        _common(
            _p("PrimaryBusId", "Identity"),
            _p("SecondaryBusId", "Identity"),
            _p("TertiaryBusId", "Identity"),
            _p("PrimaryKV", "Electrical", "kV"),
            _p("SecondaryKV", "Electrical", "kV"),
            _p("TertiaryKV", "Electrical", "kV"),
            _p("MVA", "Electrical", "MVA"),
        ),
        display_name="3-Winding Transformer",
    ),
    _type(
        "TransmissionLine",
        "Transmission Lines",
        _common(
            _p("FromBusId", "Identity"),
            _p("ToBusId", "Identity"),
            _p("BaseKV", "Electrical", "kV"),
            _p("Length", units="mi"),
            _p("RatingA", "Electrical", "A"),
        ),
        display_name="Transmission Line",
    ),
    _type(
        "UPS",
        "UPSs",
        _common(
            _p("InputBusId", "Identity"),
            _p("OutputBusId", "Identity"),
            _p("KVA", "Electrical", "kVA"),
            _p("XR"),
        ),
    ),
    _type(
        "Utility",
        "Utilities",
        _common(
            _p("ToBusId", "Identity"),
            _p("BaseKV", "Electrical", "kV"),
            _p("UtilKV", "Electrical", "kV"),
            _p("FaultUnit", "Electrical"),
            _p("ThreePhaseSC", "Electrical"),
            _p("SingleLineGroundSC", "Electrical"),
        ),
    ),
    _type(
        "ZigzagTransformer",
        "Zigzag Transformers",
        _common(
            _p("ToBusId", "Identity"),
            _p("BaseKV", "Electrical", "kV"),
            _p("ZOhms", "Electrical"),
        ),
        display_name="Zigzag Transformer",
    ),
)
