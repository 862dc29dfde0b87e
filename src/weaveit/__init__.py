"""WeaveIt generation service.

Credit-gated orchestration that turns a script into narrated audio or a
rendered video. HTTP routers stay thin facades over the ledger, job registry,
artifact store and pipeline services.
"""
