# falcoguard

falcoguard holds the decision logic of an extension that deploys Falco
runtime security into managed clusters ("shoots"). You call it from your
own admission webhook or controller. It works on plain Python objects and
makes no network calls.

## What is in the package

- **`falcoguard.service`**: `FalcoServiceConfig` is the per-shoot provider
  config. It holds the Falco version, auto update, the rule resources
  (`gardener` or `falcoctl`), the falcoctl section (`FalcoCtl`, `Install`,
  `Follow`, `FalcoCtlIndex`), the Gardener rule switches (`Gardener`) and a
  custom webhook (`Webhook`).
  - `FalcoServiceConfig.decode` reads JSON or YAML. The document must have
    kind `FalcoServiceConfig` and apiVersion
    `falco.extensions.gardener.cloud/v1alpha1`.
  - `FalcoServiceConfig.encode` writes compact JSON.
  - `from_dict` and `to_dict` convert to and from the object form.
- **`falcoguard.falcoprofile`**: `FalcoProfile` is a profile resource
  (`falco.gardener.cloud/v1alpha1`). It lists the Falco, Falcosidekick and
  falcoctl versions and their images. Use `from_dict` and `to_dict` to
  convert it.
- **`falcoguard.shoot`**: `Shoot` and `Extension` hold the parts of a shoot
  that the webhooks read. `Shoot.find_extension` returns the first
  extension of a given type.
- **`falcoguard.versions`**: `Version` is a profile entry with a version,
  a classification and an optional expiration date. `SemVer` parses and
  orders version strings.
  - `get_auto_update_version` returns the highest supported version that
    has not expired.
  - `get_force_update_version` finds a replacement for an expired
    version. It first tries the lowest supported or deprecated version
    above the current one. If there is none, it takes the highest
    non-expired one that is not above the current one.
  - The lower-level choosers are also public.
  - Every function takes an optional `now`.
- **`falcoguard.mutator`**: `ShootMutator.mutate` fills in defaults in
  place. Shoots that are being deleted are left alone, and so are shoots
  whose extension is missing or disabled. The defaults are:
  - the highest supported version
  - auto update on
  - resources `gardener`
  - an empty falcoctl section
  - the standard rules on, with incubating and sandbox rules off
  - the custom webhook off

  The `set_*` helpers apply the same defaults one at a time.
- **`falcoguard.validator`**: `ShootValidator.validate` raises
  `ValidationError`, which collects every failed check. It rejects:
  - a missing or unknown version, or a deprecated version that has expired
  - a resources value other than `gardener` or `falcoctl`
  - a missing falcoctl section
  - unset rule switches
  - a webhook that is missing, that is neither enabled nor disabled, or
    that is enabled without an address

  When restricted usage is on, it also checks that the project is
  eligible. It checks this only for shoots that had no Falco config
  before. You turn restricted usage on with the `restricted_usage` field,
  or with the `RESTRICTED_USAGE` environment variable when that field is
  `None`. A project is eligible if:
  - it is named `garden`, or
  - it carries the annotation `falco.gardener.cloud/enabled` with a true
    value.

  Projects are kept in a thread-safe `Projects` cache. You fill it with
  `update`, `delete` or `handle_event` (`ADDED`, `MODIFIED`, `DELETED`).
- **`falcoguard.validation`**: `validate_falco_service_config` returns a
  list of `FieldError`. It flags a resources value other than `gardener` or
  `falcoctl`. When resources is `gardener`, it also flags empty custom rule
  references.
- **`falcoguard.config`**: `Configuration.decode` reads the controller's
  YAML configuration. The document must have kind `Configuration` and
  apiVersion `falco.extensions.config.gardener.cloud/v1alpha1`. Durations
  such as `720h` become `timedelta`. `FalcoOptions.add_flags` adds
  `--config-file` to an `argparse` parser. `FalcoOptions.complete` loads
  that file.
- **`falcoguard.imagevector`**: `read_image_vector` and
  `read_image_vector_file` parse image vectors with a top-level `images`
  list. `merge` keeps several versions of one image name: images are
  matched by name, version, runtime version, target version and
  architectures. `with_env_override` merges the file named in
  `IMAGEVECTOR_OVERWRITE` over a vector.
- **`falcoguard.constants`**: shared names, rule file names and
  certificate lifetimes.

## Example

```python
from falcoguard.mutator import ShootMutator
from falcoguard.shoot import Extension, Shoot
from falcoguard.validator import ShootValidator
from falcoguard.versions import Version

raw = (
    b'{"kind": "FalcoServiceConfig",'
    b' "apiVersion": "falco.extensions.gardener.cloud/v1alpha1",'
    b' "falcoVersion": "0.38.0"}'
)
versions = {"0.38.0": Version("0.38.0", "supported")}

shoot = Shoot(
    name="demo",
    namespace="garden-demo",
    extensions=[Extension(type="shoot-falco-service", provider_config=raw)],
)

ShootMutator(falco_versions=versions).mutate(shoot)
ShootValidator(falco_versions=versions, restricted_usage=False).validate(shoot)

print(shoot.find_extension().provider_config)
```

`falco_versions` can be a mapping. It can also be a function with no
arguments that returns one, so a live profile is read on every call.

Errors are raised as exceptions:

- a malformed provider config raises `falcoguard.service.DecodeError`
- a rejected config raises `falcoguard.validator.ValidationError`
- finding no suitable version raises `falcoguard.versions.VersionError`
- a bad controller configuration raises `falcoguard.config.ConfigError`

## What it does not do

falcoguard has no command, no webhook server and no controller loop. It
does not talk to a cluster API:

- It does not watch projects or profiles. You feed `Projects` and the
  version mappings yourself.
- It does not deploy Falco, render charts or issue certificates.

## Requirements

Python 3.10 or later and PyYAML.