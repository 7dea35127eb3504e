import random

from tsp_lab.colony import AntColonyConfig, AntColonyStepper
from tsp_lab.data import level_from_dict
from tsp_lab.evolutionary import GeneticConfig, GeneticStepper
from tsp_lab.solvers import held_karp, nearest_neighbor_tour, tour_length, two_opt


def main():
    inst = level_from_dict({"name": "spiral-10", "n": 10, "layout": "uniform", "seed": 7, "start": 0})
    graph = inst.graph

    nn = nearest_neighbor_tour(graph)
    print(f"nn: {tour_length(graph, nn):.1f}")
    print(f"2-opt: {tour_length(graph, two_opt(graph, nn, max_passes=6)):.1f}")
    print(f"held-karp: {tour_length(graph, held_karp(graph)):.1f}")

    steppers = [
        AntColonyStepper(graph, AntColonyConfig(iterations=20), rng=random.Random(1)),
        GeneticStepper(graph, GeneticConfig(generations=20), rng=random.Random(1)),
    ]
    for stepper in steppers:
        while True:
            snap = stepper.step()
            print(f"{stepper.name} {snap.progress}: best={snap.best_length:.1f}")
            if snap.done:
                break


if __name__ == "__main__":
    main()
