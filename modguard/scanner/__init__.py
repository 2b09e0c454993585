"""modguard scanner — Go import parsing and blocked-import detection."""
