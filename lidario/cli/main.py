from enum import Enum
from pathlib import Path
from typing import Dict, Optional

import rich
import typer
from rich.console import Console
from rich.table import Table

import lidario
from lidario.canonical import CanonicalHeader
from lidario.lidarfile import LidarFile

console = Console()

app = typer.Typer(help="CLI tool using lidario")


class CliLazBackend(str, Enum):
    lazrs = "lazrs"
    laszip = "laszip"


cli_name_to_backend: Dict[CliLazBackend, lidario.LazBackend] = {
    CliLazBackend.lazrs: lidario.LazBackend.Lazrs,
    CliLazBackend.laszip: lidario.LazBackend.Laszip,
}


def print_header(hdr: CanonicalHeader):
    """
    Prints the header information in a pretty table
    """
    table = Table(title="Header", show_header=False, box=None)
    table.add_row("Version", f"[cyan]{hdr.version}")
    table.add_row("Point Format Id", f"[cyan]{hdr.point_format_id}")
    table.add_row("Point Record Length", f"[cyan]{hdr.point_data_record_length}")
    table.add_row("Point Count", f"[cyan]{hdr.point_count}")
    table.add_row("Compressed", f"[cyan]{hdr.are_points_compressed}")
    table.add_row("Header Size", f"[cyan]{hdr.header_size}")
    table.add_row("Offset To Point Data", f"[cyan]{hdr.offset_to_point_data}")
    table.add_row("Number Of VLRs", f"[cyan]{hdr.number_of_vlrs}")
    table.add_row("Scales", f"[blue]{list(hdr.scales)}")
    table.add_row("Offsets", f"[blue]{list(hdr.offsets)}")
    table.add_row("Mins", f"[blue]{list(hdr.mins)}")
    table.add_row("Maxs", f"[blue]{list(hdr.maxs)}")
    table.add_row(
        "Number Of Points By Return", f"[blue]{list(hdr.number_of_points_by_return)}"
    )

    console.print(table)


def print_points(f: LidarFile, count: int):
    """
    Prints the first `count` points of the file
    """
    header = f.get_header()
    table = Table(title="Points", show_header=True, box=None)
    for column in ("Index", "X", "Y", "Z", "Intensity", "Return", "Classification"):
        table.add_column(column)
    if header.point_format.has_gps_time:
        table.add_column("GPS Time")
    if header.point_format.has_color:
        table.add_column("Color")

    for index in range(min(count, header.point_count)):
        point = f.read_point_at(index)
        row = [
            str(index),
            f"{point.x:.3f}",
            f"{point.y:.3f}",
            f"{point.z:.3f}",
            str(point.intensity),
            f"{point.return_number}/{point.number_of_returns}",
            str(point.classification),
        ]
        if point.has_gps_time():
            row.append(f"{point.gps_time:.3f}")
        if point.has_color():
            row.append(f"{point.color.red}, {point.color.green}, {point.color.blue}")
        table.add_row(*row)

    console.print(table)


@app.command()
def info(
    file_path: Path,
    points: int = typer.Option(
        0, "--points", min=0, help="Number of points to print, starting at the first"
    ),
    laz_backend: Optional[CliLazBackend] = typer.Option(
        None, help="The Laz backend to use."
    ),
):
    """
    Print information about a LAS/LAZ file

    The type of the file and its header are printed, use --points to also
    print the first points


    Examples:


    # Prints the header

    lidario info file.las

    ---

    # Prints the header and the first 10 points

    lidario info file.laz --points 10
    """
    backend = cli_name_to_backend[laz_backend] if laz_backend is not None else None
    try:
        rich.print(f"File Type: [cyan]{lidario.get_file_type(file_path)}")
        mode = "r" if points > 0 else "rh"
        with lidario.open_lidar(file_path, mode=mode, laz_backend=backend) as f:
            print_header(f.get_header())
            if points > 0:
                rich.print(50 * "-")
                print_points(f, points)
    except Exception as e:
        rich.print("[bold red]Error:")
        rich.print(e)
        raise typer.Exit(code=1)


def version_callback(value: bool):
    if value:
        print(f"{lidario.__version__}")
        raise typer.Exit()


@app.command()
def version():
    """
    Print version information
    """
    version_callback(True)


@app.callback()
def app_main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Print version and exit",
    )
):
    # Silence warning
    _ = version


def main():
    app()


if __name__ == "__main__":
    app()
