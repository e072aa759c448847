"""Day 3 labs: transactions, replica sets, sharding and change streams.

Labs 10, 11 and 13 need a replica set; on a standalone server those
steps fail with a runtime error, which is the signal the course
environment is not ready.
"""

from __future__ import annotations

from typing import Any

from bson import ObjectId

from .context import LabContext, registry

CHANGE_STREAM_CLAIM_ID = "claim_cs_test1"
CHANGE_STREAM_AWAIT_MS = 500
CHANGE_STREAM_POLLS = 10


# =============================================================================
# Lab 10: Transactions
# =============================================================================


@registry.step(
    "Lab10", "Step1", "Create a client session",
    source="const session = db.getMongo().startSession()",
)
def start_session(ctx: LabContext) -> Any:
    with ctx.client.start_session() as session:
        return session.session_id


@registry.step(
    "Lab10", "Step2", "Commit a multi-document transaction",
    source='session.withTransaction(() => { sessionDb.customers.updateOne({ customerId: "CUST000001" }, { $inc: { policyCount: 1 } }); sessionDb.payments.insertOne({ customerId: "CUST000001", amount: 108.33 }) })',
)
def commit_transaction(ctx: LabContext) -> Any:
    customers = ctx.insurance.customers
    payments = ctx.insurance.payments

    def record_policy_payment(session: Any) -> Any:
        customers.update_one(
            {"customerId": "CUST000001"},
            {"$inc": {"policyCount": 1}},
            session=session,
        )
        return payments.insert_one(
            {
                "paymentId": f"PAY-TXN-{ObjectId()}",
                "customerId": "CUST000001",
                "policyNumber": "POL-AUTO-001",
                "amount": 108.33,
                "paymentType": "premium",
                "status": "completed",
            },
            session=session,
        )

    with ctx.client.start_session() as session:
        return session.with_transaction(record_policy_payment)


@registry.step(
    "Lab10", "Step3", "Aborted transaction leaves no trace",
    source="session.abortTransaction()",
)
def abort_transaction(ctx: LabContext) -> Any:
    payment_id = f"PAY-ABORT-{ObjectId()}"
    with ctx.client.start_session() as session:
        session.start_transaction()
        ctx.insurance.payments.insert_one(
            {"paymentId": payment_id, "customerId": "CUST000002", "amount": 1.0},
            session=session,
        )
        session.abort_transaction()
    return ctx.insurance.payments.count_documents({"paymentId": payment_id}) == 0


# =============================================================================
# Lab 11: Replica Sets
# =============================================================================


@registry.step("Lab11", "Step1", "Check replica set status", source="rs.status()")
def replica_set_status(ctx: LabContext) -> Any:
    return ctx.client.admin.command("replSetGetStatus")


@registry.step("Lab11", "Step2", "View replica set configuration", source="rs.conf()")
def replica_set_config(ctx: LabContext) -> Any:
    return ctx.client.admin.command("replSetGetConfig")


@registry.step("Lab11", "Step3", "Check current primary", source="db.hello()")
def hello(ctx: LabContext) -> Any:
    return ctx.client.admin.command("hello")


@registry.step(
    "Lab11", "Step4", "List replica set members",
    source="rs.status().members.map(m => m.name + ': ' + m.stateStr)",
)
def replica_set_members(ctx: LabContext) -> Any:
    status = ctx.client.admin.command("replSetGetStatus")
    return [f"{m['name']}: {m['stateStr']}" for m in status["members"]]


# =============================================================================
# Lab 12: Sharding
# =============================================================================


@registry.step("Lab12", "Step1", "Read shard list", min_results=0, source="sh.status()")
def shard_list(ctx: LabContext) -> Any:
    return ctx.client["config"].shards.find()


@registry.step("Lab12", "Step2", "Check whether connected to mongos", min_results=0, source="db.hello().msg")
def connected_to_mongos(ctx: LabContext) -> Any:
    return ctx.client.is_mongos


# =============================================================================
# Lab 13: Change Streams
# =============================================================================


@registry.step(
    "Lab13", "Step1", "Create notifications index",
    source="db.notifications.createIndex({ recipientId: 1, timestamp: -1 })",
)
def notifications_index(ctx: LabContext) -> Any:
    return ctx.insurance.notifications.create_index([("recipientId", 1), ("timestamp", -1)])


@registry.step(
    "Lab13", "Step2", "Create activity log index",
    source="db.activity_log.createIndex({ timestamp: -1 })",
)
def activity_log_index(ctx: LabContext) -> Any:
    return ctx.insurance.activity_log.create_index([("timestamp", -1)])


@registry.step(
    "Lab13", "Step3", "Insert change stream test claim",
    source='db.claims.insertOne({ _id: "claim_cs_test1", claimNumber: "CLM-2024-CS001", customerId: "CUST000001", policyNumber: "POL-AUTO-001" })',
)
def insert_test_claim(ctx: LabContext) -> Any:
    ctx.insurance.claims.delete_one({"_id": CHANGE_STREAM_CLAIM_ID})
    return ctx.insurance.claims.insert_one({
        "_id": CHANGE_STREAM_CLAIM_ID,
        "claimNumber": "CLM-2024-CS001",
        "customerId": "CUST000001",
        "policyNumber": "POL-AUTO-001",
        "status": "submitted",
    })


@registry.step("Lab13", "Step4", "Open a change stream", source="const stream = db.claims.watch()")
def open_change_stream(ctx: LabContext) -> Any:
    with ctx.insurance.claims.watch(max_await_time_ms=CHANGE_STREAM_AWAIT_MS) as stream:
        return stream.alive


@registry.step(
    "Lab13", "Step5", "Receive an update event",
    source='db.claims.updateOne({ _id: "claim_cs_test1" }, { $set: { status: "under_review" } }); stream.tryNext()',
)
def receive_change_event(ctx: LabContext) -> Any:
    claims = ctx.insurance.claims
    with claims.watch(
        [{"$match": {"operationType": "update"}}],
        max_await_time_ms=CHANGE_STREAM_AWAIT_MS,
    ) as stream:
        claims.update_one(
            {"_id": CHANGE_STREAM_CLAIM_ID},
            {"$set": {"status": "under_review", "reviewedAt": ObjectId().generation_time}},
        )
        for _ in range(CHANGE_STREAM_POLLS):
            change = stream.try_next()
            if change is not None:
                return change
    return None
