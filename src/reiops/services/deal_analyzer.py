from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, Mapping

from reiops.adapters.config import config
from reiops.adapters.logging_utils import get_logger
from reiops.analysis.acquisition import compute_acquisition
from reiops.analysis.cashflow import compute_cash_flow
from reiops.analysis.financing import compute_financing
from reiops.analysis.guardrails import collect_risk_flags
from reiops.analysis.market import compare_to_market
from reiops.analysis.metrics import compute_metrics
from reiops.analysis.operations import compute_operations
from reiops.analysis.qualification import qualify_borrower
from reiops.analysis.scoring import score_deal
from reiops.analysis.strategies import analyze_brrrr
from reiops.domain.errors import InputValidationError
from reiops.domain.ports import ListingSource
from reiops.domain.property import NormalizedInputs, PropertyInputs
from reiops.domain.reference import DEFAULT_REFERENCE_DATA, ReferenceData
from reiops.domain.results import AnalysisResult, BorrowerProfile, DealAnalysis
from reiops.services.validation import normalize_inputs

logger = get_logger(__name__)


def analyze_normalized(
    inputs: NormalizedInputs,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
    *,
    borrower: BorrowerProfile | None = None,
    notes: Iterable[str] = (),
) -> DealAnalysis:
    """
    Single pass over an already-normalized snapshot:

      acquisition -> financing -> operations -> cash flow -> metrics -> scoring

    Every stage reads only earlier results, so the same snapshot and
    reference tables always give an equal DealAnalysis.
    """
    acquisition = compute_acquisition(inputs, reference)
    financing = compute_financing(inputs, acquisition, reference)
    operations = compute_operations(inputs)
    cash_flow = compute_cash_flow(operations, financing)

    qualification = None
    if borrower is not None:
        qualification = qualify_borrower(financing, inputs, borrower, reference)

    metrics = compute_metrics(inputs, acquisition, financing, operations, cash_flow, qualification)
    market = compare_to_market(inputs, metrics, reference)
    flags = collect_risk_flags(inputs, acquisition, financing, cash_flow, metrics, market, reference)

    if qualification is not None and qualification.gds is None:
        notes = (*notes, "Borrower income is zero; GDS/TDS are undefined")

    scoring = score_deal(metrics, cash_flow, market, flags=flags, notes=notes)
    brrrr = analyze_brrrr(inputs, acquisition, financing, cash_flow, reference)

    if flags:
        logger.info(
            "deal risk flags raised",
            extra={
                "context": {
                    "address": inputs.address,
                    "flags": [f.code for f in flags],
                    "score": scoring.total_score,
                }
            },
        )
    else:
        logger.debug(
            "deal analyzed",
            extra={"context": {"address": inputs.address, "score": scoring.total_score}},
        )

    return DealAnalysis(
        property=inputs,
        acquisition=acquisition,
        financing=financing,
        operations=operations,
        cash_flow=cash_flow,
        metrics=metrics,
        market=market,
        scoring=scoring,
        flags=flags,
        brrrr=brrrr,
        qualification=qualification,
        reference_version=reference.version,
    )


def analyze_deal(
    raw: PropertyInputs | Mapping[str, Any],
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
    *,
    borrower: BorrowerProfile | None = None,
) -> AnalysisResult:
    """
    Primary entrypoint: normalize then analyze.

    Returns either the analysis or the full list of field errors, never both.
    Normalizer warnings are carried into the scoring warnings. A borrower
    without a heating estimate gets the configured default.
    """
    normalized = normalize_inputs(raw, reference)
    if not normalized.ok:
        return AnalysisResult(analysis=None, errors=normalized.errors, warnings=normalized.warnings)

    if borrower is not None and borrower.heating_monthly is None:
        borrower = replace(borrower, heating_monthly=config.DEFAULT_HEATING_MONTHLY)

    analysis = analyze_normalized(
        normalized.inputs,
        reference,
        borrower=borrower,
        notes=normalized.warnings,
    )
    return AnalysisResult(analysis=analysis, errors=(), warnings=analysis.scoring.warnings)


def analyze_deal_or_raise(
    raw: PropertyInputs | Mapping[str, Any],
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
    *,
    borrower: BorrowerProfile | None = None,
) -> DealAnalysis:
    result = analyze_deal(raw, reference, borrower=borrower)
    if result.analysis is None:
        raise InputValidationError(result.errors)
    return result.analysis


def analyze_listing(
    source: ListingSource,
    ref: str,
    overrides: Mapping[str, Any] | None = None,
    reference: ReferenceData = DEFAULT_REFERENCE_DATA,
    *,
    borrower: BorrowerProfile | None = None,
) -> AnalysisResult:
    """
    Analyze a listing fetched from a lookup or scraper collaborator.

    User overrides (financing terms, rent, expenses) win over listing fields;
    blank overrides are ignored so a form can send every key.
    """
    record: dict[str, Any] = dict(source.fetch(ref))
    for key, value in (overrides or {}).items():
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        record[key] = value

    logger.debug("analyzing listing", extra={"context": {"ref": ref, "fields": sorted(record)}})
    return analyze_deal(record, reference, borrower=borrower)
