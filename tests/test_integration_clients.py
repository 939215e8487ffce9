"""
Tests for the suspension directory and WITS clients (requests session mocked).
"""

from datetime import date
from unittest.mock import Mock

import pytest
import requests

from core.errors import RateNotFound, SuspensionDirectoryUnavailable, TransportError
from integration.suspension_directory import SuspensionDirectoryClient
from integration.wits_adapter import WITSAdapter


def _json_response(body, status=200):
    r = Mock()
    r.status_code = status
    r.json.return_value = body
    if status >= 400:
        r.raise_for_status.side_effect = requests.HTTPError(f"{status} Server Error")
    return r


def _xml_response(content, status=200):
    r = Mock()
    r.status_code = status
    r.reason = "OK" if status < 400 else "Error"
    r.content = content.encode("utf-8")
    return r


# ---------------------------------------------------------------------------
# Suspension directory
# ---------------------------------------------------------------------------


def test_intervals_sorted_by_valid_from():
    session = Mock(spec=requests.Session)
    session.get.return_value = _json_response({
        "suspensions": [
            {"valid_from": "2022-05-01", "valid_to": None},
            {"valid_from": "2019-01-01T00:00:00.000Z", "valid_to": "2020-12-31T00:00:00.000Z"},
        ]
    })
    client = SuspensionDirectoryClient(base_url="http://dir", session=session, timeout=3)

    intervals = client.list_intervals("USA", "290110", 2018, 2024)

    assert [i.valid_from for i in intervals] == [date(2019, 1, 1), date(2022, 5, 1)]
    assert intervals[0].valid_to == date(2020, 12, 31)
    assert intervals[1].valid_to is None
    assert session.get.call_args.kwargs["params"] == {
        "importerCode": "USA",
        "productCode": "290110",
        "startYear": 2018,
        "endYear": 2024,
    }


def test_plain_list_payload_accepted():
    session = Mock(spec=requests.Session)
    session.get.return_value = _json_response([{"validFrom": "2021-03-15"}])

    intervals = SuspensionDirectoryClient(base_url="http://dir", session=session).list_intervals("USA", "290110", 2020, 2022)

    assert intervals[0].valid_from == date(2021, 3, 15)


def test_unreachable_directory_raises():
    session = Mock(spec=requests.Session)
    session.get.side_effect = requests.ConnectionError("refused")

    with pytest.raises(SuspensionDirectoryUnavailable):
        SuspensionDirectoryClient(base_url="http://dir", session=session).list_intervals("USA", "290110", 2020, 2022)


def test_http_error_raises():
    session = Mock(spec=requests.Session)
    session.get.return_value = _json_response({}, status=503)

    with pytest.raises(SuspensionDirectoryUnavailable):
        SuspensionDirectoryClient(base_url="http://dir", session=session).list_intervals("USA", "290110", 2020, 2022)


# ---------------------------------------------------------------------------
# WITS
# ---------------------------------------------------------------------------

SDMX_SERIES = """<?xml version="1.0" encoding="UTF-8"?>
<message:StructureSpecificData xmlns:message="http://www.sdmx.org/resources/sdmxml/schemas/v2_1/message">
  <message:DataSet>
    <Series FREQ="A" REPORTER="840" PARTNER="000" PRODUCTCODE="290110" TARIFF_AVERAGE="3.7">
      <Obs TIME_PERIOD="2012" OBS_VALUE="3.7"/>
    </Series>
  </message:DataSet>
</message:StructureSpecificData>
"""

SDMX_OBS_ONLY = """<?xml version="1.0" encoding="UTF-8"?>
<DataSet>
  <Series FREQ="A" REPORTER="840">
    <Obs TIME_PERIOD="2014" OBS_VALUE="n/a" RATE="5.25"/>
  </Series>
</DataSet>
"""

SDMX_EMPTY = """<?xml version="1.0" encoding="UTF-8"?><DataSet><Series FREQ="A"/></DataSet>"""


def test_wits_rate_from_series_attribute():
    session = Mock(spec=requests.Session)
    session.get.return_value = _xml_response(SDMX_SERIES)

    rate = WITSAdapter(session=session).get_reported_rate("840", "290110", 2012)

    assert rate == 3.7
    url = session.get.call_args.args[0]
    assert url.endswith("/TRN/reporter/840/partner/000/product/290110/year/2012/datatype/reported")


def test_wits_rate_from_obs_attribute():
    session = Mock(spec=requests.Session)
    session.get.return_value = _xml_response(SDMX_OBS_ONLY)

    assert WITSAdapter(session=session).get_reported_rate("36", "290110", 2014) == 5.25
    assert "/reporter/036/" in session.get.call_args.args[0]


def test_wits_without_rate_is_not_found():
    session = Mock(spec=requests.Session)
    session.get.return_value = _xml_response(SDMX_EMPTY)

    with pytest.raises(RateNotFound):
        WITSAdapter(session=session).get_reported_rate("840", "290110", 2012)


def test_wits_http_error_is_transport_error():
    session = Mock(spec=requests.Session)
    session.get.return_value = _xml_response("", status=500)

    with pytest.raises(TransportError):
        WITSAdapter(session=session).get_reported_rate("840", "290110", 2012)


def test_wits_rejects_alpha_reporter():
    with pytest.raises(ValueError):
        WITSAdapter(session=Mock(spec=requests.Session)).get_reported_rate("USA", "290110", 2012)
