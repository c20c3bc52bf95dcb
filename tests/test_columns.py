from import_pipeline.columns import NOT_FOUND, ColumnMap, detect_columns


def test_detect_basic_headers():
    column_map = detect_columns(["Descripcion", "Fecha", "Monto ARS", "Medio"])

    assert column_map.description == 0
    assert column_map.date == 1
    assert column_map.amount_local == 2
    assert column_map.payment_method == 3
    assert column_map.amount_foreign == NOT_FOUND
    assert column_map.installments_total == NOT_FOUND


def test_detect_full_header_set():
    headers = [
        "Fecha",
        "Concepto",
        "Cuotas",
        "Cuota Actual",
        "Pesos",
        "Monto USD",
        "Tarjeta",
        "Banco",
        "Quién",
        "Rubro",
    ]
    column_map = detect_columns(headers)

    assert column_map == ColumnMap(
        description=1,
        date=0,
        installments_total=2,
        installment_current=3,
        amount_local=4,
        amount_foreign=5,
        payment_method=6,
        entity=7,
        responsible=8,
        category=9,
    )
    assert column_map.missing() == []


def test_detection_is_deterministic():
    headers = ["Detalle", "dia", "Importe", "Dólar", "Emisor"]
    assert detect_columns(headers) == detect_columns(list(headers))


def test_last_matching_header_wins():
    column_map = detect_columns(["Cuotas", "Descripcion", "Cuota total"])
    assert column_map.installments_total == 2


def test_generic_amount_fallback():
    column_map = detect_columns(["Descripcion", "Importe", "Fecha"])
    assert column_map.amount_local == 1


def test_generic_amount_fallback_only_when_local_missing():
    column_map = detect_columns(["Total", "Monto ARS"])
    assert column_map.amount_local == 1


def test_no_columns_found_is_not_an_error():
    column_map = detect_columns(["foo", None, 42])
    assert column_map.found() == []
