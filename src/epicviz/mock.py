"""Built-in demo epic for trying the layout without a repository client."""

from __future__ import annotations

from epicviz.ir.model import Batch, Epic, Task, collect_dependencies, compute_progress
from epicviz.types import IssueStatus

DONE = IssueStatus.DONE
IN_PROGRESS = IssueStatus.IN_PROGRESS
READY = IssueStatus.parse("ready")


def _task(number: int, title: str, status: IssueStatus, depends_on: tuple[int, ...] = ()) -> Task:
    return Task(number=number, title=title, status=status, depends_on=depends_on, id=number * 1000)


def _batch(number: int, title: str, tasks: list[Task], depends_on: tuple[int, ...] = ()) -> Batch:
    progress = compute_progress(tasks)
    if progress == 100:
        status = DONE
    elif progress > 0:
        status = IN_PROGRESS
    else:
        status = READY
    return Batch(
        number=number,
        title=title,
        tasks=tuple(tasks),
        status=status,
        depends_on=depends_on,
        progress=progress,
        id=number * 1000,
    )


def get_mock_epic() -> Epic:
    """Seven batches, two batch-dependency chains and a handful of task chains."""
    batches = (
        _batch(
            9090,
            "Simplify metered usage interface",
            [
                _task(9101, "create_m →widget.m subsc...", DONE),
                _task(9102, "Remove debit_memo_ite...", IN_PROGRESS, (9101,)),
                _task(9103, "getUsageSubscr iptio...", DONE),
                _task(9104, "github_owner_id →meterit...", DONE),
                _task(9105, "github_subscriptio n_s...", IN_PROGRESS),
                _task(9106, "Remove InvoiceInvoicec...", READY, (9105,)),
                _task(9107, "Remove metered...", IN_PROGRESS),
                _task(9108, "github_owner_id Migrate", READY, (9107,)),
                _task(9109, "Extract sub-issue", DONE),
            ],
        ),
        _batch(
            9287,
            "Simplify Zuora sales and self serve rate plan modeling in Meuse",
            [
                _task(9201, "Add salesforce_a cc...", IN_PROGRESS),
                _task(9202, "create_zuora _s...", IN_PROGRESS, (9201,)),
                _task(9203, "Zuora finance", DONE),
                _task(9204, "Add subscription ID...", IN_PROGRESS, (9203,)),
                _task(9205, "Create link Cust...", READY),
                _task(9206, "Copy old data", READY, (9205,)),
                _task(9207, "Stop old data", READY, (9206,)),
            ],
            (9090,),
        ),
        _batch(
            9321,
            "Unit of measure catalog in Meuse stafftools UI",
            [
                _task(9301, "Add or remove th...", IN_PROGRESS),
                _task(9302, "Unit catals et...", IN_PROGRESS, (9301,)),
            ],
        ),
        _batch(
            9400,
            "Embellishments and fixes",
            [
                _task(9401, "Remove print...", READY),
                _task(9402, "table of retired sku...", IN_PROGRESS),
                _task(9403, "Delete billing entit...", READY, (9402,)),
                _task(9404, "Stores Core sku's...", DONE),
                _task(9405, "To missing environment...", DONE),
                _task(9406, "Impacted attributes #9...", IN_PROGRESS),
                _task(9407, "Difference environmen...", READY, (9406,)),
            ],
            (9321,),
        ),
        _batch(
            9324,
            "Finish the meter_uuid → product name + sku migration",
            [
                _task(9501, "Add remove. data and product sku ...", IN_PROGRESS),
                _task(9502, "verify all mapping sku...", IN_PROGRESS, (9501,)),
                _task(9503, "Update meter_uuid to sk...", IN_PROGRESS),
                _task(9504, "Add metered_emit_m...", READY, (9503,)),
                _task(9505, "consume metered_emi...", DONE),
                _task(9506, "Remove meter_uuid in...", READY, (9505,)),
                _task(9507, "emit_emi metered_emi...", READY),
                _task(9508, "Allow_1 metered emi...", DONE),
                _task(9509, "Remove metered...", DONE),
                _task(9510, "meter_uuid deprecated from APIs", DONE),
            ],
        ),
        _batch(
            9322,
            "Create products in Meuse stafftools UI",
            [
                _task(9601, "Add creation page is s...", IN_PROGRESS),
                _task(9602, "Add Tweet class_9 of Pr...", DONE),
                _task(9603, "create_button at val onl...", IN_PROGRESS, (9602,)),
                _task(9604, "Revise private_butto at...", READY),
            ],
            (9324,),
        ),
        _batch(
            9323,
            "Create Meuse → Dotcom product sync",
            [
                _task(9701, "Add a consumer event is...", IN_PROGRESS),
                _task(9702, "Combine user sku exist...", IN_PROGRESS, (9701,)),
                _task(9703, "Add MeuseProductSyncMiddle...", READY, (9702,)),
                _task(9704, "Add EventPublisher...", READY),
                _task(9705, "Meuse get to data...", READY, (9703, 9704)),
                _task(9706, "Add DotcomEvent ps...", DONE),
                _task(9707, "Issue a cleanup old create by...", READY, (9706,)),
            ],
            (9322,),
        ),
    )
    return Epic(
        number=8833,
        title="Remove friction from metered product launch",
        batches=batches,
        owner="example",
        repo="repo",
        status=IN_PROGRESS,
        dependencies=collect_dependencies(batches),
        id=8833000,
    )
