import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle

from .network import COUPLE, DUMMY, LayoutNetwork


def draw_network(network: LayoutNetwork, outfile: str = "debug.svg", dpi: int = 100) -> str:
    """
    Draw the laid-out network with one box per vertex and save it as SVG.

    Couple vertices are drawn dashed, cohort dummies as a small cross. Edges go
    from focus point to focus point, so a wrong focus shows up immediately.

    Parameters
    ----------
    network : LayoutNetwork
        Network after ``GenogramLayout.do_layout`` assigned coordinates.
    outfile : str
        Output SVG filename.
    """
    vertices = network.vertices
    m = 10  # margin
    if vertices:
        min_x = min(v.x for v in vertices)
        min_y = min(v.y for v in vertices)
        max_x = max(v.x + v.width for v in vertices)
        max_y = max(v.y + v.height for v in vertices)
    else:
        min_x = min_y = max_x = max_y = 0

    width_px = int(max_x - min_x + 2 * m)
    height_px = int(max_y - min_y + 2 * m)
    fig, ax = plt.subplots(figsize=(max(4, width_px / dpi), max(3, height_px / dpi)), dpi=dpi)

    for e in network.edges:
        u, v = vertices[e.source], vertices[e.target]
        ax.plot(
            [u.x + u.focus_x, v.x + v.focus_x],
            [u.y + u.focus_y, v.y + v.focus_y],
            linewidth=1.2,
            c="gray" if e.link is None else "black",
        )

    for v in vertices:
        if v.kind == DUMMY:
            ax.plot(v.x, v.y, marker="x", c="red")
            continue
        rect = Rectangle(
            (v.x, v.y),
            v.width,
            v.height,
            fill=False,
            linewidth=1.2,
            linestyle="--" if v.kind == COUPLE else "-",
        )
        ax.add_patch(rect)
        ax.text(v.x + v.width / 2, v.y + v.height / 2, f"{v.node} [{v.layer}]", ha="center", va="center")

    ax.set_xlim(min_x - m, max_x + m)
    ax.set_ylim(min_y - m, max_y + m)
    ax.invert_yaxis()
    ax.set_aspect("equal")
    ax.axis("off")
    plt.tight_layout(pad=0)

    fig.savefig(outfile, format="svg", bbox_inches="tight")
    plt.close(fig)
    return outfile
