"""Runbook entry points: Optimize-VMSize, Optimize-Storage and Optimize-Database."""

import asyncio
import sys
from typing import Any, Callable, Dict, Optional, Sequence
import click
import structlog

from costopt.clients.azure.client_factory import AzureClientFactory
from costopt.config.catalog import PricingCatalog, load_catalog
from costopt.config.settings import Settings
from costopt.core.exceptions import CostOptimizationException
from costopt.core.utils import format_currency, setup_logging
from costopt.runbooks import (
    BaseRunbook, DatabaseScalingRunbook, DatabaseType, StorageTieringRunbook, VmSizeRunbook
)

logger = structlog.get_logger(__name__)

RunbookBuilder = Callable[[Dict[str, Any], Settings, PricingCatalog, str], BaseRunbook]


def common_options(func):
    """Options every runbook accepts."""
    options = [
        click.option('--resource-group', '-g', default=None,
                     help='Resource group to scan (default: AZURE_RESOURCE_GROUP)'),
        click.option('--force', is_flag=True, help='Apply changes that need approval below the manual ceiling'),
        click.option('--dry-run', is_flag=True, help='Report what would change without touching anything'),
        click.option('--catalog', default=None, type=click.Path(dir_okay=False),
                     help='YAML file overriding the built-in pricing catalog'),
        click.option('--output', '-o', default=None, help='Write results, summary and events to this JSON file'),
        click.option('--debug', is_flag=True, help='Enable debug logging'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


async def execute_runbook(client_names: Sequence[str], build: RunbookBuilder, resource_group: Optional[str],
                          catalog_path: Optional[str], output: Optional[str], debug: bool) -> int:
    """Shared lifecycle: settings, authentication, scope check, run, report. Returns the exit code."""
    try:
        settings = Settings.create_from_env()
        setup_logging(
            log_level="DEBUG" if debug else settings.log_level.value,
            log_format=settings.log_format.value,
        )
        
        resource_group = resource_group or settings.azure.resource_group
        if not resource_group:
            click.echo("❌ Error: no resource group given (use --resource-group or set AZURE_RESOURCE_GROUP)",
                       err=True)
            return 1
        
        catalog = load_catalog(catalog_path or settings.runbook.catalog_path)
        
        async with AzureClientFactory(settings.azure.model_dump()) as factory:
            clients = await factory.create_clients(*client_names)
            factory.verify_resource_group(resource_group)
            
            runbook = build(clients, settings, catalog, resource_group)
            report = await runbook.run()
            runbook.reporter.write_json(report, output)
        
        summary = report.summary
        click.echo(f"{'🧪' if summary.dry_run else '✅'} {summary.runbook} completed")
        click.echo(f"   Resources processed: {summary.total_resources}")
        for action, count in summary.action_counts.items():
            if count:
                click.echo(f"   {action}: {count}")
        click.echo(f"   Estimated monthly savings: {format_currency(summary.total_estimated_savings)}")
        click.echo(f"   Applied monthly savings: {format_currency(summary.applied_savings)}")
        if output:
            click.echo(f"📁 Results saved to: {output}")
        return 0
    
    except CostOptimizationException as e:
        logger.error("Runbook aborted", error=str(e), error_type=type(e).__name__)
        click.echo(f"❌ {e}", err=True)
        return 1
    except Exception as e:
        logger.exception("Runbook failed unexpectedly", error=str(e))
        click.echo(f"❌ Runbook failed: {e}", err=True)
        if debug:
            import traceback
            click.echo(traceback.format_exc(), err=True)
        return 1


@click.command()
@click.option('--vm-name', default=None, help='Only process this virtual machine')
@click.option('--target-size', default=None, help='Resize to this size instead of the recommended one')
@common_options
def optimize_vm_size(vm_name, target_size, resource_group, force, dry_run, catalog, output, debug):
    """
    Right-size underutilized virtual machines.

    Reads CPU, memory and disk metrics for the lookback window, maps idle VMs
    to a smaller size and resizes the ones whose savings pass the approval gate.
    Running VMs are deallocated, resized and started again.

    Example:
        optimize-vm-size --resource-group rg-prod --dry-run
    """
    def build(clients, settings, pricing, scope):
        return VmSizeRunbook(
            clients, settings, pricing, scope,
            vm_name=vm_name, target_size=target_size, force=force, dry_run=dry_run,
        )
    
    sys.exit(asyncio.run(execute_runbook(("compute", "monitor"), build, resource_group, catalog, output, debug)))


@click.command()
@click.option('--storage-account', default=None, help='Only process this storage account')
@click.option('--target-tier', type=click.Choice(['Hot', 'Cool', 'Archive']), default=None,
              help='Move every blob to this tier instead of the recommended one')
@common_options
def optimize_storage(storage_account, target_tier, resource_group, force, dry_run, catalog, output, debug):
    """
    Move idle blobs to cheaper access tiers.

    Blobs not read (or, without access tracking, not modified) for 30 days move
    from Hot to Cool; 90 days moves Cool to Archive and 180 days moves Hot
    straight to Archive. One failing blob never stops the account.

    Example:
        optimize-storage --resource-group rg-prod --storage-account stlogs --dry-run
    """
    def build(clients, settings, pricing, scope):
        return StorageTieringRunbook(
            clients, settings, pricing, scope,
            account_name=storage_account, target_tier=target_tier, force=force, dry_run=dry_run,
        )
    
    sys.exit(asyncio.run(execute_runbook(("storage", "monitor"), build, resource_group, catalog, output, debug)))


@click.command()
@click.option('--database-type', type=click.Choice([t.value for t in DatabaseType]), default=DatabaseType.ALL.value,
              help='Which database services to scan')
@click.option('--database-name', default=None, help='Only process this database or Cosmos DB account')
@click.option('--target-sku', default=None, help='Scale SQL databases to this service objective')
@common_options
def optimize_database(database_type, database_name, target_sku, resource_group, force, dry_run, catalog,
                      output, debug):
    """
    Scale underutilized SQL databases and review Cosmos DB throughput.

    SQL databases below the DTU threshold are scaled down one tier. Saturated
    databases and Cosmos DB accounts get advisory recommendations that an
    operator applies by hand.

    Example:
        optimize-database --resource-group rg-prod --database-type SqlDatabase --force
    """
    def build(clients, settings, pricing, scope):
        return DatabaseScalingRunbook(
            clients, settings, pricing, scope,
            database_type=DatabaseType(database_type), database_name=database_name,
            target_sku=target_sku, force=force, dry_run=dry_run,
        )
    
    sys.exit(asyncio.run(execute_runbook(("database", "monitor"), build, resource_group, catalog, output, debug)))
