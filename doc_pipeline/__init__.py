"""
Document pipeline core package.

The `processing` subsystem holds the job lifecycle: dataclasses for job
state and extraction artifacts, in-memory job/content repositories with
per-job locking, the fixed stage plan, a simulated extraction engine, and a
worker pool that drives jobs from `processing` to `completed` or `failed`
while clients poll for snapshots.
"""
