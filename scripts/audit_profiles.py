"""Audit entity profiles for patterns likely to confuse the header mapper.

This is a heuristic lint tool with expected false positives.
Treat output as advisory, not authoritative.
"""

from __future__ import annotations

import sys
from collections import defaultdict
from pathlib import Path
from typing import Optional

from rostercheck.domain.profiles import EntityProfile, ProfileSet, load_profiles
from rostercheck.services.inference.header_mapper import map_headers
from rostercheck.utils.normalize import normalize_header


def unpatterned_fields(profile: EntityProfile) -> list[str]:
    """Fields that can only be matched by exact name or similarity."""
    return [f for f in profile.fields if not profile.patterns_for(f)]


def shared_patterns(profile: EntityProfile) -> dict[str, list[str]]:
    """Pattern text used by more than one field of the same profile."""
    owners: defaultdict[str, list[str]] = defaultdict(list)
    for field in profile.fields:
        for rx in profile.patterns_for(field):
            owners[rx.pattern].append(field)
    return {p: fs for p, fs in owners.items() if len(fs) > 1}


def self_mapping_failures(profile: EntityProfile, profiles: ProfileSet) -> list[tuple[str, str]]:
    """Canonical headers that do not map onto themselves."""
    mapping = map_headers(list(profile.fields), profile.entity_type, profiles=profiles)
    return [(h, t) for h, t in mapping.assignments.items() if h != t]


def cross_profile_fields(profiles: ProfileSet) -> dict[str, list[str]]:
    seen: defaultdict[str, list[str]] = defaultdict(list)
    for profile in profiles:
        for field in profile.fields:
            seen[normalize_header(field)].append(profile.entity_type.value)
    return {f: roles for f, roles in seen.items() if len(roles) > 1}


def audit_profiles(path: Optional[Path] = None) -> int:
    profiles = load_profiles(path)
    findings = 0

    print("=" * 80)
    print("ENTITY PROFILE AUDIT REPORT")
    print("=" * 80)
    for profile in profiles:
        role = profile.entity_type.value
        print(
            f"\n{role:8s}: {len(profile.required_fields)} required, "
            f"{len(profile.optional_fields)} optional, {len(profile.signals)} signals"
        )

        missing = unpatterned_fields(profile)
        if missing:
            print(f"  [i] no patterns for: {', '.join(missing)}")

        for pattern, fields in sorted(shared_patterns(profile).items()):
            findings += 1
            print(f"  [!] pattern '{pattern}' shared by {fields}")

        for header, target in self_mapping_failures(profile, profiles):
            findings += 1
            print(f"  [!] canonical header '{header}' maps to '{target}'")

    shared = cross_profile_fields(profiles)
    if shared:
        print("\n" + "=" * 80)
        print("FIELDS PRESENT IN SEVERAL PROFILES (advisory)")
        print("=" * 80)
        for field, roles in sorted(shared.items()):
            print(f"  {field:25s} : {', '.join(roles)}")

    print("\n" + "=" * 80)
    if findings:
        print(f"[!] Found {findings} potential profile problems to review")
    else:
        print("[OK] No obvious profile issues found!")
    print("=" * 80)
    return 1 if findings else 0


if __name__ == "__main__":
    arg = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    raise SystemExit(audit_profiles(arg))
