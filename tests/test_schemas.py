# tests/test_schemas.py
from safetool.schemas.dcavg import DemandCalculationRequest, DeviceDcavgInfo
from safetool.schemas.electrical_drawing import DrawingLinkRequest, ElectricalDrawingInfo


def test_demand_request_defaults():
    req = DemandCalculationRequest()
    assert req.devices is None
    assert req.demand_rate == 0.0
    assert req.series_count == 0


def test_demand_request_keeps_values():
    d1 = DeviceDcavgInfo(id="d1", dcavg=0.9)
    d2 = DeviceDcavgInfo(id="d2", dcavg=0.6)
    req = DemandCalculationRequest(devices=[d1, d2], demand_rate=3.5, series_count=2)
    assert req.devices == [d1, d2]
    assert req.demand_rate == 3.5
    assert req.series_count == 2


def test_demand_request_accepts_camel_and_snake_case():
    camel = DemandCalculationRequest.model_validate({"demandRate": 0.5, "seriesCount": 3})
    snake = DemandCalculationRequest.model_validate({"demand_rate": 0.5, "series_count": 3})
    assert camel == snake
    assert camel.devices is None


def test_demand_request_does_not_validate_ranges():
    req = DemandCalculationRequest(
        devices=[DeviceDcavgInfo(id="x", dcavg=7.0)], demand_rate=-1.0, series_count=-4
    )
    assert req.devices[0].dcavg == 7.0
    assert req.series_count == -4


def test_demand_request_json_round_trip():
    req = DemandCalculationRequest(
        devices=[DeviceDcavgInfo(id="S1", dcavg=0.99)], demand_rate=0.25, series_count=1
    )
    payload = req.model_dump_json(by_alias=True)
    assert '"demandRate"' in payload
    assert DemandCalculationRequest.model_validate_json(payload) == req


def test_drawing_link_request_defaults():
    req = DrawingLinkRequest()
    assert req.resource_type == ""
    assert req.resource_id == ""
    assert req.drawing is not None
    assert req.drawing == ElectricalDrawingInfo()


def test_drawing_default_is_fresh_per_request():
    a, b = DrawingLinkRequest(), DrawingLinkRequest()
    a.drawing.file_name = "changed.pdf"
    assert b.drawing.file_name == ""


def test_drawing_link_request_keeps_values():
    info = ElectricalDrawingInfo(id="DWG-7", file_name="panel.dwg", version="B", file_size=2048)
    req = DrawingLinkRequest(resource_type="panel", resource_id="P-100", drawing=info)
    assert req.resource_type == "panel"
    assert req.resource_id == "P-100"
    assert req.drawing == info


def test_drawing_link_request_json_round_trip():
    req = DrawingLinkRequest.model_validate({
        "resourceType": "SRS",
        "resourceId": "srs-1",
        "drawing": {
            "id": "DWG-1",
            "fileName": "main.pdf",
            "version": "3",
            "fileSize": 10,
            "sheetNumber": "2/5",
            "createdAt": "2025-03-01T10:00:00",
        },
    })
    again = DrawingLinkRequest.model_validate_json(req.model_dump_json(by_alias=True))
    assert again == req
    assert again.drawing.sheet_number == "2/5"
    assert again.drawing.title is None
