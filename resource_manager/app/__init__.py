"""
Resource Manager client package.

The client turns immutable domain values into calls against the Cloud
Resource Manager service, enforcing:
- Retries: bounded exponential backoff on transient failures
- Pagination: lazy, cursor-following pages over list calls
- Concurrency: etag-checked read-modify-write of IAM and org policies

Structure:
- app.service: ResourceManager, the client facade.
- app.models: Entity values, builders and wire DTOs.
- app.rpc: RPC facade protocol and the httpx implementation.
- app.paging: Page abstraction over list calls.
- app.concurrency: IAM and organization policy controllers.
- app.options: Typed call options.
- app.testing: In-memory service emulator for tests.
"""
